import logging

from irrigation.models.reading import Reading
from irrigation.services.reading_source import ReadingSource

logger = logging.getLogger(__name__)

MOISTURE_BOOST = 30.0
MANUAL_REASON = "manual watering triggered"


class ActuationService:
    """
    Manual watering. The pump is not driven here: a fresh reading is taken and
    the effect of watering is applied to it.

    The derived reading never goes into the history buffer: it is a simulated
    effect, not a measurement. Soil moisture drops back on the next real
    reading.
    """

    def __init__(self, source: ReadingSource):
        self.source = source

    def water(self) -> Reading:
        logger.info("Manual watering triggered...")
        baseline = self.source.acquire()
        watered = baseline.with_watering(MOISTURE_BOOST, MANUAL_REASON)
        logger.info(
            "Manual watering completed (soil %.1f%% -> %.1f%%)",
            baseline.sensors.soil_moisture,
            watered.sensors.soil_moisture,
        )
        return watered
