import inspect
import logging.handlers
import os
from pathlib import Path

LOG_DIR = os.getenv("MCPROFILE_LOG_DIR")
LOG_FILE_NAME = "mcprofile.log"
PACKAGE_DIR = "mcprofile" + os.sep


class ClassNameFilter(logging.Filter):
    def filter(self, record):
        abs_path = os.path.abspath(record.pathname)
        pkg_index = abs_path.rfind(PACKAGE_DIR)
        if pkg_index != -1:
            relpath = abs_path[pkg_index:]
        else:
            relpath = os.path.basename(abs_path)
        if relpath.endswith(".py"):
            relpath = relpath[:-3]
        record.relpath = relpath.replace(os.sep, ".")
        record.classname = ""
        frame = inspect.currentframe()
        while frame:
            code = frame.f_code
            if code.co_name == record.funcName:
                self_obj = frame.f_locals.get("self")
                if self_obj is not None:
                    record.classname = self_obj.__class__.__name__
                    break
            frame = frame.f_back
        return True


class SmartClassFormatter(logging.Formatter):
    def format(self, record):
        location = record.relpath
        if record.classname:
            location = f"{location}.{record.classname}"
        record.location = location
        return super().format(record)


fmt = "%(asctime)s - [%(levelname)s] - %(location)s.%(funcName)s(): %(message)s {%(lineno)d}"
formatter = SmartClassFormatter(fmt)

console = logging.StreamHandler()
console.setFormatter(formatter)

logger = logging.getLogger("mcprofile")
logger.setLevel(os.getenv("MCPROFILE_LOG_LEVEL", "INFO").upper())
logger.addFilter(ClassNameFilter())
logger.addHandler(console)
logger.propagate = False

if LOG_DIR:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.TimedRotatingFileHandler(
        Path(LOG_DIR) / LOG_FILE_NAME, when="midnight", interval=1, backupCount=5, encoding="utf-8"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
