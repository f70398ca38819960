"""Record validation and the bounded repair loop."""

from inputcheck.validate.invariants import RecordValidator, validate_record
from inputcheck.validate.repair_loop import LoopState, RepairLoop, RepairLoopConfig, RepairSession
from inputcheck.validate.schema import OutputRecordSchema, schema_violations

__all__ = [
    "LoopState",
    "OutputRecordSchema",
    "RecordValidator",
    "RepairLoop",
    "RepairLoopConfig",
    "RepairSession",
    "schema_violations",
    "validate_record",
]
