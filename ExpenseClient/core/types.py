"""Records mirrored from the REST resources.

The backend speaks camelCase JSON. Each record is built with ``from_json`` and,
where it is sent back to the server, serialised with ``to_json``, which omits
keys whose value is ``None``.
"""
import dataclasses
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar('T')


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclasses.dataclass
class User:
    id: int
    email: str
    name: str
    created_at: str = ''
    updated_at: str = ''

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=data['id'],
            email=data.get('email', ''),
            name=data.get('name', ''),
            created_at=data.get('createdAt') or '',
            updated_at=data.get('updatedAt') or '',
        )


@dataclasses.dataclass
class Category:
    id: int
    name: str
    user_id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Category':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            user_id=data.get('userId'),
            created_at=data.get('createdAt'),
        )


@dataclasses.dataclass
class Expense:
    """An expense as returned by the server."""
    id: int
    amount: float
    currency: str
    date: str
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    description: Optional[str] = None
    receipt_mongo_id: Optional[str] = None
    tags: List[str] = dataclasses.field(default_factory=list)
    created_at: str = ''
    updated_at: str = ''

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Expense':
        return cls(
            id=data['id'],
            amount=float(data.get('amount') or 0.0),
            currency=data.get('currency') or '',
            date=data.get('date') or '',
            user_id=data.get('userId'),
            user_name=data.get('userName'),
            category_id=data.get('categoryId'),
            category_name=data.get('categoryName'),
            description=data.get('description'),
            receipt_mongo_id=data.get('receiptMongoId'),
            tags=list(data.get('tags') or []),
            created_at=data.get('createdAt') or '',
            updated_at=data.get('updatedAt') or '',
        )


@dataclasses.dataclass
class ExpenseDraft:
    """The body of a create request."""
    amount: float
    currency: str
    date: str
    category_id: Optional[int] = None
    description: Optional[str] = None
    receipt_mongo_id: Optional[str] = None
    tags: Optional[List[str]] = None

    def to_json(self) -> Dict[str, Any]:
        return _compact({
            'categoryId': self.category_id,
            'amount': self.amount,
            'currency': self.currency,
            'date': self.date,
            'description': self.description,
            'receiptMongoId': self.receipt_mongo_id,
            'tags': self.tags or None,
        })


@dataclasses.dataclass
class ExpenseChanges:
    """The body of an update request. Unset fields are left untouched by the server."""
    amount: Optional[float] = None
    currency: Optional[str] = None
    date: Optional[str] = None
    category_id: Optional[int] = None
    description: Optional[str] = None
    receipt_mongo_id: Optional[str] = None
    tags: Optional[List[str]] = None

    def to_json(self) -> Dict[str, Any]:
        return _compact({
            'categoryId': self.category_id,
            'amount': self.amount,
            'currency': self.currency,
            'date': self.date,
            'description': self.description,
            'receiptMongoId': self.receipt_mongo_id,
            'tags': self.tags,
        })


@dataclasses.dataclass
class Receipt:
    id: str
    file_name: str
    mime_type: str
    file_size: int
    user_id: Optional[int] = None
    expense_id: Optional[int] = None
    notes: Optional[str] = None
    created_at: str = ''
    updated_at: str = ''

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith('image/')

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == 'application/pdf'

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'Receipt':
        return cls(
            id=str(data['id']),
            file_name=data.get('fileName') or '',
            mime_type=data.get('mimeType') or '',
            file_size=int(data.get('fileSize') or 0),
            user_id=data.get('userId'),
            expense_id=data.get('expenseId'),
            notes=data.get('notes'),
            created_at=data.get('createdAt') or '',
            updated_at=data.get('updatedAt') or '',
        )


@dataclasses.dataclass
class LoginResponse:
    token: str
    token_type: str
    user_id: int
    email: str
    name: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'LoginResponse':
        return cls(
            token=data['token'],
            token_type=data.get('tokenType') or 'Bearer',
            user_id=data.get('userId'),
            email=data.get('email') or '',
            name=data.get('name') or '',
        )


@dataclasses.dataclass
class Page(Generic[T]):
    """One page of a paginated listing."""
    content: List[T]
    total_elements: int = 0
    total_pages: int = 0
    size: int = 0
    number: int = 0
    first: bool = True
    last: bool = True
    empty: bool = True

    @classmethod
    def from_json(cls, data: Dict[str, Any], item: Callable[[Dict[str, Any]], T]) -> 'Page[T]':
        content = [item(f) for f in data.get('content') or []]
        return cls(
            content=content,
            total_elements=int(data.get('totalElements') or 0),
            total_pages=int(data.get('totalPages') or 0),
            size=int(data.get('size') or 0),
            number=int(data.get('number') or 0),
            first=bool(data.get('first', True)),
            last=bool(data.get('last', True)),
            empty=bool(data.get('empty', not content)),
        )


@dataclasses.dataclass
class ExpenseFilters:
    """Query filters of the expense listing and total endpoints."""
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    category_id: Optional[int] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    q: Optional[str] = None
    currency: Optional[str] = None
    tag: Optional[str] = None

    def to_params(self, include_search: bool = True) -> Dict[str, Any]:
        """Query parameters for the set filters.

        Empty strings and a zero category id are skipped, amount bounds are
        sent whenever they are set, including ``0``.
        """
        params: Dict[str, Any] = {}
        if self.from_date:
            params['fromDate'] = self.from_date
        if self.to_date:
            params['toDate'] = self.to_date
        if self.category_id:
            params['categoryId'] = self.category_id
        if self.min_amount is not None:
            params['minAmount'] = self.min_amount
        if self.max_amount is not None:
            params['maxAmount'] = self.max_amount
        if self.q and include_search:
            params['q'] = self.q
        if self.currency:
            params['currency'] = self.currency
        if self.tag:
            params['tag'] = self.tag
        return params


@dataclasses.dataclass
class ValidationError:
    field: str
    message: str


@dataclasses.dataclass
class ErrorResponse:
    """The error body the backend returns with non-2xx responses."""
    timestamp: str = ''
    status: int = 0
    error: str = ''
    message: str = ''
    path: str = ''
    validation_errors: List[ValidationError] = dataclasses.field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ErrorResponse':
        errors = []
        for item in data.get('validationErrors') or []:
            if isinstance(item, dict):
                errors.append(ValidationError(str(item.get('field', '')), str(item.get('message', ''))))
        return cls(
            timestamp=str(data.get('timestamp') or ''),
            status=int(data.get('status') or 0),
            error=str(data.get('error') or ''),
            message=str(data.get('message') or ''),
            path=str(data.get('path') or ''),
            validation_errors=errors,
        )
