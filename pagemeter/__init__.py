"""pagemeter — headless-browser page performance measurement."""

from pagemeter.measurement.engine import measure as measure
from pagemeter.models.result import MeasurementResult as MeasurementResult
from pagemeter.utils.errors import SessionLaunchError as SessionLaunchError

__version__ = "0.1.0"
