from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from models import Account


class AccountIn(BaseModel):
    name: str
    secret: str
    issuer: Optional[str] = None

    def to_account(self) -> Account:
        return Account(name=self.name.strip(), secret=self.secret, issuer=self.issuer or None)


class AccountList(BaseModel):
    accounts: List[AccountIn] = Field(min_length=1)

    def to_accounts(self) -> List[Account]:
        return [a.to_account() for a in self.accounts]


class CardGenerateRequest(BaseModel):
    quantity: int = 10
    bin: Optional[str] = None
    expiry_month: Optional[str] = None
    expiry_year: Optional[str] = None
    cvv: Optional[str] = None
    card_type: Optional[str] = None
    format: Literal["json", "pipe"] = "json"


class AddressGenerateRequest(BaseModel):
    country: str
    quantity: int = 1
    include_name: bool = False
    include_phone: bool = False
    include_email: bool = False
