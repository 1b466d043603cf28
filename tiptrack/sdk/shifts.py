"""
Shift storage and validation.

This module owns the local shift store and the validation pipeline that
guards it. CLI and MCP tools should be thin wrappers that call these
functions; the aggregation engine (periods, taxes, summary) never touches
storage and only sees the snapshot returned by load_shifts().

Storage layout
--------------

    {data_dir}/shifts/{year}/{id}.json

Each file holds ``{"meta": {...}, "data": {...}}`` where ``data`` is a
ShiftRecord dump (snake_case, ISO date) and ``meta`` carries created_at,
updated_at and any validation warnings.

Validation
----------

Errors (block the write):
    - missing or unparseable date
    - missing/non-numeric hours, total tips, claimed tips
    - negative amounts, tax rate outside 0-100
    - unknown fields

Warnings (stored in meta.warnings, write proceeds):
    - claimed tips exceed total tips
    - more than 24 hours in one shift

A file on disk that no longer validates (hand-edited, older format) is
skipped by load_shifts() with a logged warning rather than failing the
whole summary, so it lands in no period bucket.
"""

import hashlib
import json
import logging
import os
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from .config import get_data_path
from .schemas import ShiftRecord

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

MAX_SHIFT_HOURS = 24
SHIFT_ID_PATTERN = re.compile(r"[0-9a-f]{8}")


# =============================================================================
# VALIDATION PIPELINE
# =============================================================================

class ValidationError(Exception):
    """Raised when a shift fails validation."""
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


def _format_pydantic_errors(e: PydanticValidationError) -> List[str]:
    """Flatten pydantic errors into 'field: message' strings."""
    errors = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "shift"
        if err["type"] == "missing":
            errors.append(f"missing required field: {loc}")
        else:
            errors.append(f"{loc}: {err['msg']}")
    return errors


def _shift_warnings(shift: ShiftRecord) -> List[str]:
    """Plausibility checks that don't block a write."""
    warnings = []
    if shift.claimed_tips > shift.total_tips:
        warnings.append(
            f"claimed_tips ({shift.claimed_tips:.2f}) exceeds total_tips ({shift.total_tips:.2f})"
        )
    if shift.hours_worked > MAX_SHIFT_HOURS:
        warnings.append(f"hours_worked ({shift.hours_worked}) exceeds {MAX_SHIFT_HOURS}")
    return warnings


def validate_shift(data: Dict[str, Any]) -> Tuple[ShiftRecord, List[str]]:
    """Run the validation pipeline on raw shift input.

    Args:
        data: Shift fields (snake_case or camelCase keys)

    Returns:
        Tuple of (shift, warnings)

    Raises:
        ValidationError: If the input can't form a valid ShiftRecord
    """
    if data is None:
        raise ValidationError(["shift data cannot be None"])

    try:
        shift = ShiftRecord.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_format_pydantic_errors(e)) from e

    return shift, _shift_warnings(shift)


# =============================================================================
# STORAGE FUNCTIONS
# =============================================================================

def get_shifts_dir() -> Path:
    """Get the shifts base directory ({data_dir}/shifts/), created if needed."""
    shifts_dir = get_data_path() / "shifts"
    shifts_dir.mkdir(parents=True, exist_ok=True)
    return shifts_dir


def _generate_shift_id(shift: ShiftRecord, created_at: str) -> str:
    """Generate an 8-char shift ID from the shift date and creation time.

    Two shifts on the same day with identical amounts are legitimate, so
    creation time is part of the identity. The ID stays fixed across edits.
    """
    content = f"shift|{shift.date.isoformat()}|{created_at}"
    return hashlib.sha256(content.encode()).hexdigest()[:8]


def _read_shift_file(json_file: Path) -> Optional[Dict[str, Any]]:
    """Load one shift file, adding 'id' and '_path'; None if unreadable."""
    try:
        with open(json_file) as f:
            record = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"{json_file.name}: unreadable shift file ({e})")
        return None

    record["id"] = json_file.stem
    record["_path"] = str(json_file)
    return record


def _write_shift_file(target_dir: Path, shift_id: str, meta: Dict[str, Any], shift: ShiftRecord) -> Path:
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / f"{shift_id}.json"
    with open(path, "w") as f:
        json.dump({"meta": meta, "data": shift.model_dump(mode="json")}, f, indent=2)
    return path


def _find_shift_file(shift_id: str) -> Optional[Path]:
    """Locate a shift file by ID; None for anything but an 8-char hex ID."""
    if not isinstance(shift_id, str) or not SHIFT_ID_PATTERN.fullmatch(shift_id):
        logger.debug(f"rejected shift id {shift_id!r}")
        return None
    for json_file in get_shifts_dir().rglob(f"{shift_id}.json"):
        return json_file
    return None


def add_shift(data: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Validate and store a new shift.

    Returns:
        Tuple of (record, warnings). The record has 'id', 'meta', 'data'
        and '_path' keys.

    Raises:
        ValidationError: If validation fails
    """
    shift, warnings = validate_shift(data)

    created_at = datetime.now().isoformat()
    meta = {"created_at": created_at, "updated_at": created_at}
    if warnings:
        meta["warnings"] = warnings

    shift_id = _generate_shift_id(shift, created_at)
    target_dir = get_shifts_dir() / str(shift.date.year)
    path = _write_shift_file(target_dir, shift_id, meta, shift)

    logger.debug(f"added shift {shift_id} for {shift.date} -> {path}")
    for w in warnings:
        logger.warning(f"shift {shift_id}: {w}")

    return _read_shift_file(path), warnings


def update_shift(shift_id: str, changes: Dict[str, Any]) -> Optional[Tuple[Dict[str, Any], List[str]]]:
    """Apply field changes to an existing shift and re-validate it.

    Derived fields (total from cash + credit, withholding) are recomputed.
    A date change into another year moves the file; the ID is kept.

    Returns:
        Tuple of (record, warnings), or None if the shift doesn't exist

    Raises:
        ValidationError: If the updated shift is invalid
    """
    path = _find_shift_file(shift_id)
    if path is None:
        return None

    existing = _read_shift_file(path)
    if existing is None:
        return None

    merged = dict(existing.get("data") or {})
    merged.update({k: v for k, v in changes.items() if v is not None})
    # Withholding is always derived; never carry a stale value forward
    merged.pop("tax_withholding", None)

    shift, warnings = validate_shift(merged)

    meta = dict(existing.get("meta") or {})
    meta["updated_at"] = datetime.now().isoformat()
    meta.pop("warnings", None)
    if warnings:
        meta["warnings"] = warnings

    target_dir = get_shifts_dir() / str(shift.date.year)
    new_path = _write_shift_file(target_dir, shift_id, meta, shift)
    if new_path != path:
        path.unlink()
        logger.debug(f"moved shift {shift_id}: {path} -> {new_path}")

    return _read_shift_file(new_path), warnings


def get_shift(shift_id: str) -> Optional[Dict[str, Any]]:
    """Get a single stored shift by its 8-char ID."""
    path = _find_shift_file(shift_id)
    if path is None:
        return None
    return _read_shift_file(path)


def remove_shift(shift_id: str) -> bool:
    """Delete a shift by ID. Returns False if it wasn't found."""
    path = _find_shift_file(shift_id)
    if path is None:
        return False
    path.unlink()
    return True


def list_years() -> List[str]:
    """Year directories that contain shift files, ascending."""
    shifts_dir = get_shifts_dir()
    return sorted(
        d.name for d in shifts_dir.iterdir()
        if d.is_dir() and d.name.isdigit() and any(d.glob("*.json"))
    )


def list_shifts(year: Optional[str] = None, month: Optional[int] = None) -> List[Dict[str, Any]]:
    """List stored shift records, newest first.

    Args:
        year: Filter by year (e.g., "2025")
        month: Filter by month number (1-12); applies within each year scanned

    Returns:
        List of records, each with 'id', 'meta', 'data' and '_path' keys
    """
    shifts_dir = get_shifts_dir()

    if year:
        scan_dirs = [shifts_dir / str(year)]
    else:
        scan_dirs = [d for d in shifts_dir.iterdir() if d.is_dir()]

    results = []
    for scan_dir in scan_dirs:
        if not scan_dir.exists():
            continue
        for json_file in scan_dir.glob("*.json"):
            record = _read_shift_file(json_file)
            if record is None:
                continue
            if month is not None:
                date_str = (record.get("data") or {}).get("date") or ""
                if date_str[5:7] != f"{month:02d}":
                    continue
            results.append(record)

    results.sort(key=lambda r: str((r.get("data") or {}).get("date") or ""), reverse=True)
    return results


def load_shifts(year: Optional[str] = None) -> List[ShiftRecord]:
    """Load stored shifts as validated ShiftRecords for the engine.

    Files that fail validation are skipped with a warning.
    """
    shifts = []
    for record in list_shifts(year=year):
        try:
            shift, _ = validate_shift(record.get("data"))
        except ValidationError as e:
            logger.warning(f"skipping shift {record['id']}: {e}")
            continue
        shifts.append(shift)
    return shifts


def clear_all_shifts() -> int:
    """Delete all stored shifts (for reset). Returns the number deleted."""
    shifts_dir = get_shifts_dir()

    count = sum(1 for _ in shifts_dir.rglob("*.json"))
    shutil.rmtree(shifts_dir)

    return count
