"""Chat session quality scoring tool - Entry point."""

from dotenv import load_dotenv

from session_quality.cli import app

# Load environment variables from .env file
load_dotenv()

if __name__ == "__main__":
    app()
