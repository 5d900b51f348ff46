"""SF Import - Scheduled import of fetched Salesforce JSON batches."""

import logging

__version__ = "0.1.0"
__author__ = "SF Import Team"
__license__ = "Apache-2.0"

# Keep third-party chatter out of the import job's console output
logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("apscheduler").setLevel(logging.WARNING)
logging.getLogger("apscheduler.scheduler").setLevel(logging.WARNING)
