"""The closed set of commands accepted by the store."""

from __future__ import annotations

from dataclasses import dataclass

from rms.models import Page


@dataclass(frozen=True)
class SetPage:
    page: Page


@dataclass(frozen=True)
class OpenTable:
    """Select a table: start an order on an Available table or resume its open order."""

    table_id: int


@dataclass(frozen=True)
class UpdateTableStatus:
    table_id: int
    status: str


@dataclass(frozen=True)
class AddItemToOrder:
    item_id: str


@dataclass(frozen=True)
class UpdateItemQuantity:
    item_id: str
    quantity: int


@dataclass(frozen=True)
class RemoveItemFromOrder:
    item_id: str


@dataclass(frozen=True)
class UpdateCustomerDetails:
    name: str
    phone: str


@dataclass(frozen=True)
class FinalizeBill:
    order_id: str


@dataclass(frozen=True)
class MoveToCredit:
    order_id: str


@dataclass(frozen=True)
class AddMenuItem:
    name: str
    category: str
    price: float
    stock: int
    image_url: str = ""


@dataclass(frozen=True)
class AddExpense:
    description: str
    amount: float
    category: str


@dataclass(frozen=True)
class PaySalaries:
    """Record this month's salaries of active staff as one expense."""


@dataclass(frozen=True)
class AddCustomer:
    name: str
    phone: str


@dataclass(frozen=True)
class AddStaff:
    name: str
    role: str
    phone: str
    email: str
    salary: float


@dataclass(frozen=True)
class ToggleStaffStatus:
    staff_id: str


@dataclass(frozen=True)
class AddCategory:
    name: str


@dataclass(frozen=True)
class DeleteCategory:
    name: str


@dataclass(frozen=True)
class AddTax:
    name: str
    rate: float


@dataclass(frozen=True)
class DeleteTax:
    tax_id: str


@dataclass(frozen=True)
class ToggleTaxStatus:
    tax_id: str


@dataclass(frozen=True)
class AddTable:
    name: str
    capacity: int


@dataclass(frozen=True)
class DeleteTable:
    table_id: int


Command = (
    SetPage
    | OpenTable
    | UpdateTableStatus
    | AddItemToOrder
    | UpdateItemQuantity
    | RemoveItemFromOrder
    | UpdateCustomerDetails
    | FinalizeBill
    | MoveToCredit
    | AddMenuItem
    | AddExpense
    | PaySalaries
    | AddCustomer
    | AddStaff
    | ToggleStaffStatus
    | AddCategory
    | DeleteCategory
    | AddTax
    | DeleteTax
    | ToggleTaxStatus
    | AddTable
    | DeleteTable
)
