# Models package — re-export the report models.
# Prefer importing from the specific submodule (e.g. pagemeter.models.timing).

from pagemeter.models.browser import NavigationResult as NavigationResult
from pagemeter.models.network import (
    CapturedResource as CapturedResource,
    RequestRecord as RequestRecord,
    ResourceClass as ResourceClass,
)
from pagemeter.models.result import (
    MainDocument as MainDocument,
    MeasurementResult as MeasurementResult,
)
from pagemeter.models.timing import (
    VITAL_NAMES as VITAL_NAMES,
    NavigationTimingSnapshot as NavigationTimingSnapshot,
    ResourceTimingEntry as ResourceTimingEntry,
    VitalsReport as VitalsReport,
)
