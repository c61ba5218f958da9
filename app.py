"""Development entry point: `python app.py` (use a WSGI server in production)."""

from src.campustrack.campustrack.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=app.config["DEBUG"])
