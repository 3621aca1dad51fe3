"""CSV ingestion for portfolio positions."""

from __future__ import annotations

import io
import math
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Mapping, Optional

import pandas as pd

from ..logging_config import get_logger
from ..models.position import Position
from .portfolio_store import PortfolioStore

logger = get_logger("import_csv")

REQUIRED_COLUMNS = ("Symbol", "Quantity", "PurchasePrice", "PurchaseDate")
MAX_FILE_SIZE = 5 * 1024 * 1024
_SYMBOL_RE = re.compile(r"^[A-Z]{3,5}$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class CSVImportResult:
    """Parsed positions plus row-level validation errors."""

    success: bool
    positions: list[Position] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class ImportResult:
    """Result of importing a CSV file into the portfolio store."""

    imported: int
    errors: list[str]


def normalize_frame(content: str) -> pd.DataFrame:
    """Load CSV text as strings only, with stripped headers and no blank rows."""

    frame = pd.read_csv(
        io.StringIO(content),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    frame.columns = [str(c).strip() for c in frame.columns]
    return frame


def validate_row(row: Mapping[str, str], row_index: int, *, today: date) -> Optional[str]:
    """Return an error message for an invalid row, or ``None``."""

    label = f"Row {row_index + 1}"
    # Short rows come back from pandas as NaN floats
    values = {
        column: row[column].strip() if isinstance(row.get(column), str) else ""
        for column in REQUIRED_COLUMNS
    }
    if not all(values.values()):
        return f"{label}: Missing required fields"

    if not _SYMBOL_RE.match(values["Symbol"].upper()):
        return f'{label}: Invalid symbol "{values["Symbol"]}" (must be 3-5 uppercase letters)'

    try:
        quantity = float(values["Quantity"])
    except ValueError:
        quantity = math.nan
    if not math.isfinite(quantity) or quantity <= 0 or quantity != int(quantity):
        return f'{label}: Invalid quantity "{values["Quantity"]}" (must be positive number)'

    try:
        price = float(values["PurchasePrice"])
    except ValueError:
        price = math.nan
    if not math.isfinite(price) or price <= 0:
        return (
            f'{label}: Invalid purchase price "{values["PurchasePrice"]}" '
            "(must be positive number)"
        )

    if not _DATE_RE.match(values["PurchaseDate"]):
        return f'{label}: Invalid date "{values["PurchaseDate"]}" (must be YYYY-MM-DD)'
    try:
        purchased = date.fromisoformat(values["PurchaseDate"])
    except ValueError:
        return f'{label}: Invalid date "{values["PurchaseDate"]}"'
    if purchased > today:
        return f"{label}: Purchase date cannot be in the future"

    return None


def row_to_position(row: Mapping[str, str]) -> Position:
    # Current price starts at the purchase price until the user updates it
    price = float(str(row["PurchasePrice"]).strip())
    return Position(
        symbol=str(row["Symbol"]).strip().upper(),
        quantity=int(float(str(row["Quantity"]).strip())),
        purchase_price=price,
        current_price=price,
        purchase_date=date.fromisoformat(str(row["PurchaseDate"]).strip()),
    )


def parse_positions_csv(content: str, *, today: Optional[date] = None) -> CSVImportResult:
    """Parse CSV text into positions, collecting one error per invalid row."""

    if not content or not content.strip():
        return CSVImportResult(success=False, errors=["CSV file is empty"])

    try:
        frame = normalize_frame(content)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        return CSVImportResult(success=False, errors=[f"Parse error: {exc}"])

    if frame.empty:
        return CSVImportResult(success=False, errors=["No valid data found in CSV file"])

    reference_day = today or date.today()
    positions: list[Position] = []
    errors: list[str] = []
    for index, row in enumerate(frame.to_dict(orient="records")):
        error = validate_row(row, index, today=reference_day)
        if error:
            errors.append(error)
        else:
            positions.append(row_to_position(row))

    return CSVImportResult(
        success=not errors and bool(positions),
        positions=positions,
        errors=errors,
    )


def validate_csv_content(content: str) -> tuple[bool, Optional[str]]:
    """Cheap sanity check before parsing."""

    if "," not in content and "\n" not in content:
        return False, "File does not appear to be a valid CSV"
    return True, None


def validate_csv_file(csv_path: Path) -> tuple[bool, Optional[str]]:
    if csv_path.suffix.lower() != ".csv":
        return False, "File must be a CSV file"
    if csv_path.stat().st_size > MAX_FILE_SIZE:
        return False, "File size exceeds 5MB limit"
    return validate_csv_content(csv_path.read_text(encoding="utf-8-sig"))


def generate_sample_csv() -> str:
    """Sample content offered to users as a template."""

    rows = [
        ",".join(REQUIRED_COLUMNS),
        "PKN,100,45.50,2024-01-15",
        "JSW,50,32.00,2024-02-20",
        "CDR,200,150.75,2024-03-10",
    ]
    return "\n".join(rows)


async def import_csv_file(*, csv_path: Path, store: PortfolioStore) -> ImportResult:
    """Validate, parse and merge a positions CSV into the portfolio store."""

    logger.info(f"Starting position import from: {csv_path}")
    try:
        valid, problem = validate_csv_file(csv_path)
    except OSError as exc:
        logger.error(f"Failed to read {csv_path}: {exc}", exc_info=True)
        return ImportResult(imported=0, errors=[f"Failed to read file: {exc}"])
    if not valid:
        return ImportResult(imported=0, errors=[problem or "Invalid CSV file"])

    parsed = parse_positions_csv(csv_path.read_text(encoding="utf-8-sig"))
    imported, store_errors = await store.import_positions(parsed.positions)
    errors = parsed.errors + store_errors
    logger.info(f"Imported {imported} positions with {len(errors)} errors")
    return ImportResult(imported=imported, errors=errors)
