from flask import Blueprint, render_template

views_bp = Blueprint("views", __name__)


@views_bp.get("/")
def home():
    """
    Dashboard page.
    Template file: frontend/templates/index.html
    """
    return render_template("index.html")
