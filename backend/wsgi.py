"""
Entry point for HealthAI backend.
Run with: python wsgi.py
"""

from healthai.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=8080, debug=app.config.get("DEBUG", False))
