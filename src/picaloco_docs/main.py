from dotenv import load_dotenv

from picaloco_docs.app import create_app
from picaloco_docs.logging_config import configure_logging

# For `uvicorn picaloco_docs.main:app`; config is read at startup
load_dotenv()
configure_logging()

app = create_app()
