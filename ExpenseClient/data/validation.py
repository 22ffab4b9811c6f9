"""Validation of the expense, category and receipt forms.

The functions here are free of widgets: the views collect the raw field values
into an :class:`ExpenseFormData` and show the messages returned.
"""
import dataclasses
import datetime
import math
import pathlib
from typing import Dict, List, Optional, Union

from ..core.types import Expense, ExpenseChanges, ExpenseDraft
from ..settings import locale

MIN_AMOUNT: float = 0.01
MAX_AMOUNT: float = 999999999.99
MAX_DESCRIPTION_LENGTH: int = 1000

IMAGE_SUFFIXES: List[str] = ['.png', '.jpg', '.jpeg', '.gif', '.bmp', '.webp', '.tif', '.tiff', '.heic']
PDF_SUFFIX: str = '.pdf'

#: File dialog filter of the receipt pickers.
RECEIPT_FILE_FILTER: str = (
    f'Images and PDF files ({" ".join(f"*{s}" for s in IMAGE_SUFFIXES + [PDF_SUFFIX])})'
)


def today() -> str:
    return datetime.date.today().isoformat()


@dataclasses.dataclass
class ExpenseFormData:
    """The raw values of the expense form."""
    amount: str = ''
    currency: str = locale.DEFAULT_CURRENCY
    date: str = dataclasses.field(default_factory=today)
    category_id: Optional[int] = None
    description: str = ''
    tags: str = ''
    receipt_path: Optional[str] = None

    @classmethod
    def from_expense(cls, expense: Expense) -> 'ExpenseFormData':
        """Pre-fill the form from an existing expense."""
        return cls(
            amount=f'{expense.amount:.2f}',
            currency=expense.currency,
            date=expense.date,
            category_id=expense.category_id,
            description=expense.description or '',
            tags=', '.join(expense.tags),
        )


def parse_amount(value: Union[str, float, int, None]) -> Optional[float]:
    """Parse an amount. Returns None when the value is not a finite number."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
    else:
        try:
            v = float(str(value).strip())
        except ValueError:
            return None
    if math.isnan(v) or math.isinf(v):
        return None
    return v


def validate_expense_form(form: ExpenseFormData) -> Dict[str, str]:
    """
    Validate the expense form.

    Returns:
        dict: One message per invalid field, keyed by the field name. Empty when the form is valid.
    """
    errors: Dict[str, str] = {}

    raw_amount = form.amount.strip() if isinstance(form.amount, str) else form.amount
    if raw_amount is None or raw_amount == '':
        errors['amount'] = 'Amount is required'
    else:
        amount = parse_amount(raw_amount)
        if amount is None:
            errors['amount'] = 'Amount must be a number'
        elif amount < MIN_AMOUNT:
            errors['amount'] = 'Amount must be greater than 0'
        elif amount > MAX_AMOUNT:
            errors['amount'] = 'Amount is too large'

    currency = (form.currency or '').strip()
    if not currency:
        errors['currency'] = 'Currency is required'
    elif currency not in locale.CURRENCIES:
        errors['currency'] = 'Currency is not supported'

    date = (form.date or '').strip()
    if not date:
        errors['date'] = 'Date is required'
    else:
        try:
            datetime.date.fromisoformat(date)
        except ValueError:
            errors['date'] = 'Date must be a valid date (YYYY-MM-DD)'

    if len(form.description or '') > MAX_DESCRIPTION_LENGTH:
        errors['description'] = f'Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters'

    return errors


def parse_tags(value: str) -> List[str]:
    """Split a comma separated tag string, dropping blank entries."""
    if not value:
        return []
    return [f.strip() for f in value.split(',') if f.strip()]


def build_expense_draft(form: ExpenseFormData, receipt_mongo_id: Optional[str] = None) -> ExpenseDraft:
    """Build the create request of a validated form."""
    tags = parse_tags(form.tags)
    return ExpenseDraft(
        amount=parse_amount(form.amount),
        currency=form.currency.strip(),
        date=form.date.strip(),
        category_id=form.category_id or None,
        description=form.description or None,
        receipt_mongo_id=receipt_mongo_id,
        tags=tags or None,
    )


def build_expense_changes(form: ExpenseFormData, receipt_mongo_id: Optional[str] = None) -> ExpenseChanges:
    """Build the update request of a validated form.

    The description and the tag list are always sent so that emptying them
    clears the stored values.
    """
    return ExpenseChanges(
        amount=parse_amount(form.amount),
        currency=form.currency.strip(),
        date=form.date.strip(),
        category_id=form.category_id or None,
        description=form.description or '',
        receipt_mongo_id=receipt_mongo_id,
        tags=parse_tags(form.tags),
    )


def validate_category_name(name: str) -> Optional[str]:
    """Return the error message for an invalid category name, or None."""
    if not (name or '').strip():
        return 'Category name is required'
    return None


def is_supported_receipt(path: Union[str, pathlib.Path], mime_type: Optional[str] = None) -> bool:
    """Images and PDF files are accepted as receipts."""
    if mime_type:
        return mime_type.startswith('image/') or mime_type == 'application/pdf'
    suffix = pathlib.Path(path).suffix.lower()
    return suffix in IMAGE_SUFFIXES or suffix == PDF_SUFFIX


def validate_receipt_file(path: Optional[Union[str, pathlib.Path]], mime_type: Optional[str] = None) -> Optional[str]:
    """Return the error message for an invalid receipt selection, or None."""
    if not path:
        return 'Please select a file'
    if not is_supported_receipt(path, mime_type):
        return 'Only images and PDF files are supported'
    return None
