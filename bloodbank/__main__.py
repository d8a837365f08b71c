"""Run the blood bank API: ``python -m bloodbank``."""

import uvicorn

from bloodbank import config
from bloodbank.app import app

if __name__ == "__main__":
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
