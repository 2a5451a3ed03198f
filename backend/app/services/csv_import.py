"""
CSV Bulk Import Service.

WHAT: Imports customers and deals from spreadsheet exports.

WHY: Sales teams arrive with their pipeline in a spreadsheet. The import
must be forgiving: one bad row is reported back with its spreadsheet row
number and never stops the rest of the file. Only a file that cannot be
read at all (empty, or a header without the required columns) is
rejected as a whole.

HOW:
1. Parse with the csv module (quoted fields, embedded commas/newlines and
   doubled quotes all work); header cells are trimmed and lower-cased
2. Check the header once; a structural problem returns a single error
3. Process rows strictly in order, each insert flushed before the next
   row is checked, so duplicates inside one file are caught too
4. Collect row errors as "Row N: ..." where the first data row is row 2
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    DuplicateError,
    RowValidationError,
    StructuralImportError,
)
from app.dao.customer import CustomerDAO
from app.dao.deal import DealDAO, DealStageDAO
from app.models.deal import DealStage
from app.services.proposal_calculator import ZERO, round_money

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("name", "email")
DEAL_FIELDS = ("title", "customeremail", "value")

# Column widths of the target tables
CUSTOMER_LENGTHS = {"name": 255, "email": 255, "phone": 50, "company": 255}
DEAL_LENGTHS = {"title": 255}

# Numeric(12, 2) holds at most ten digits before the decimal point
MAX_MONEY = Decimal("1E10")

# Header cells are lower-cased; messages use the documented column names
_DISPLAY_NAMES = {"customeremail": "customerEmail"}

SUBSCRIPTION_TYPE = "subscription"

Row = Dict[str, str]


@dataclass
class ImportResult:
    """Outcome of one import run."""

    success_count: int = 0
    errors: List[str] = field(default_factory=list)


def _display(names: Sequence[str]) -> List[str]:
    return [_DISPLAY_NAMES.get(name, name) for name in names]


def read_csv(text: str, required: Sequence[str]) -> List[Tuple[int, Row]]:
    """
    Parse CSV text into numbered rows keyed by lower-cased header.

    Args:
        text: Whole CSV document
        required: Columns the header must contain

    Returns:
        (row_number, row) pairs; blank lines are skipped, numbering
        follows the spreadsheet (header is row 1)

    Raises:
        StructuralImportError: If the file is empty, unreadable, or the
            header lacks a required column
    """
    text = (text or "").lstrip("\ufeff")
    if not text.strip():
        raise StructuralImportError(message="CSV file is empty")

    try:
        reader = csv.reader(io.StringIO(text))
        header = [cell.strip().lower() for cell in next(reader)]

        missing = [name for name in required if name not in header]
        if missing:
            raise StructuralImportError(
                message=f"Missing required fields: {', '.join(_display(missing))}",
                missing=_display(missing),
            )

        rows = []
        for row_number, cells in enumerate(reader, start=2):
            if not any(cell.strip() for cell in cells):
                continue
            rows.append((row_number, dict(zip(header, (cell.strip() for cell in cells)))))
        return rows
    except csv.Error as e:
        raise StructuralImportError(message=f"CSV file could not be parsed: {e}") from e


def _missing(row: Row, required: Sequence[str]) -> bool:
    return any(not row.get(name) for name in required)


def parse_decimal(raw: Optional[str]) -> Optional[Decimal]:
    """Parse a number cell; None when empty or not a finite number."""
    if not raw:
        return None
    try:
        number = Decimal(raw)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def is_money(number: Decimal) -> bool:
    """Whether the number fits a non-negative Numeric(12, 2) column."""
    return ZERO <= number < MAX_MONEY and round_money(number) < MAX_MONEY


def _check_lengths(row_number: int, row: Row, limits: Mapping[str, int]) -> None:
    for name, limit in limits.items():
        if len(row.get(name) or "") > limit:
            raise RowValidationError(
                row_number,
                f"{_DISPLAY_NAMES.get(name, name)} exceeds {limit} characters",
                field=name,
            )


def resolve_stage(stages: Sequence[DealStage], name: Optional[str]) -> DealStage:
    """
    Pick the stage for an imported deal.

    Matches the stage name ignoring case. A missing or unknown name falls
    back to the first stage in pipeline order.
    """
    if name:
        wanted = name.strip().lower()
        for stage in stages:
            if stage.name.lower() == wanted:
                return stage
    return stages[0]


class CsvImportService:
    """
    Service for CSV imports.

    WHAT: One method per importable entity, each returning ImportResult.
    """

    def __init__(self, session: AsyncSession, strict_numbers: Optional[bool] = None):
        """
        Initialize CsvImportService.

        Args:
            session: Async database session
            strict_numbers: Reject malformed numbers instead of defaulting
                them (defaults to CSV_IMPORT_STRICT_NUMBERS)
        """
        self.session = session
        self.customer_dao = CustomerDAO(session)
        self.deal_dao = DealDAO(session)
        self.stage_dao = DealStageDAO(session)
        if strict_numbers is None:
            strict_numbers = settings.CSV_IMPORT_STRICT_NUMBERS
        self.strict_numbers = strict_numbers

    async def import_customers(self, text: str) -> ImportResult:
        """
        Import customers from CSV.

        Columns: name, email, phone, company, address (name and email required).
        An email without "@", an email already on file in any letter case,
        or a cell wider than its column rejects the row.
        """
        try:
            rows = read_csv(text, CUSTOMER_FIELDS)
        except StructuralImportError as e:
            logger.warning("Customer import rejected: %s", e.message)
            return ImportResult(errors=[e.message])

        result = ImportResult()
        for row_number, row in rows:
            try:
                await self._import_customer(row_number, row)
                result.success_count += 1
            except RowValidationError as e:
                logger.warning("Customer import: %s", e.message)
                result.errors.append(e.message)

        logger.info(
            "Customer import finished: %d imported, %d rejected",
            result.success_count,
            len(result.errors),
        )
        return result

    async def _import_customer(self, row_number: int, row: Row) -> None:
        if _missing(row, CUSTOMER_FIELDS):
            raise RowValidationError(row_number, "Missing required fields (name, email)")
        _check_lengths(row_number, row, CUSTOMER_LENGTHS)

        email = row["email"]
        if "@" not in email:
            raise RowValidationError(row_number, f"Invalid email: {email}", email=email)
        if await self.customer_dao.email_exists(email):
            raise DuplicateError(
                row_number,
                f"Customer with email {email} already exists",
                email=email,
            )

        await self.customer_dao.create(
            name=row["name"],
            email=email,
            phone=row.get("phone") or None,
            company=row.get("company") or None,
            address=row.get("address") or None,
        )

    async def import_deals(self, text: str) -> ImportResult:
        """
        Import deals from CSV.

        Columns: title, customerEmail, value, probability, stage, type,
        description (title, customerEmail and value required). The default
        pipeline is created first when no stage exists. A value must be
        non-negative with at most ten digits before the decimal point.
        """
        try:
            rows = read_csv(text, DEAL_FIELDS)
        except StructuralImportError as e:
            logger.warning("Deal import rejected: %s", e.message)
            return ImportResult(errors=[e.message])

        stages = await self.stage_dao.ensure_default_stages()

        result = ImportResult()
        for row_number, row in rows:
            try:
                await self._import_deal(row_number, row, stages)
                result.success_count += 1
            except RowValidationError as e:
                logger.warning("Deal import: %s", e.message)
                result.errors.append(e.message)

        logger.info(
            "Deal import finished: %d imported, %d rejected",
            result.success_count,
            len(result.errors),
        )
        return result

    async def _import_deal(self, row_number: int, row: Row, stages: Sequence[DealStage]) -> None:
        if _missing(row, DEAL_FIELDS):
            raise RowValidationError(
                row_number, "Missing required fields (title, customerEmail, value)"
            )
        _check_lengths(row_number, row, DEAL_LENGTHS)

        email = row["customeremail"]
        customer = await self.customer_dao.get_by_email(email)
        if customer is None:
            raise RowValidationError(
                row_number, f"Customer with email {email} not found", email=email
            )

        value = round_money(self._number(row_number, row, "value", ZERO, accept=is_money))
        probability = self._number(
            row_number, row, "probability", Decimal(settings.DEFAULT_DEAL_PROBABILITY)
        )
        probability = int(probability.to_integral_value(rounding=ROUND_HALF_UP))
        probability = max(0, min(100, probability))

        if row.get("type", "").lower() == SUBSCRIPTION_TYPE:
            subscription_value, one_time_value = value, Decimal(0)
        else:
            subscription_value, one_time_value = Decimal(0), value

        stage = resolve_stage(stages, row.get("stage"))
        await self.deal_dao.create(
            title=row["title"],
            description=row.get("description") or None,
            customer_id=customer.id,
            stage_id=stage.id,
            value=value,
            subscription_value=subscription_value,
            one_time_value=one_time_value,
            probability=probability,
        )

    def _number(
        self,
        row_number: int,
        row: Row,
        name: str,
        default: Decimal,
        accept: Optional[Callable[[Decimal], bool]] = None,
    ) -> Decimal:
        raw = row.get(name)
        number = parse_decimal(raw)
        if number is not None and (accept is None or accept(number)):
            return number
        if raw and self.strict_numbers:
            raise RowValidationError(
                row_number, f"Invalid number for {name}: {raw}", field=name
            )
        return default
