from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from shared.security_config import OBJECT_ID_PATTERN, validate_password_strength, sanitize_input

# --- Auth ---

class UserRegister(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator('password')
    def password_complexity(cls, v):
        if not validate_password_strength(v):
            raise ValueError('password must contain at least 1 letter and 1 number')
        return v

    @field_validator('name')
    def sanitize_name(cls, v):
        return sanitize_input(v)

    @field_validator('email')
    def normalize_email(cls, v):
        return v.lower()

class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email')
    def normalize_email(cls, v):
        return v.lower()

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires: datetime

# --- Users ---

class UserResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    wallet_money: float
    address: str
    role: str
    created_at: datetime

class AuthResponse(BaseModel):
    user: UserResponse
    tokens: Token

class AddressUpdate(BaseModel):
    address: str = Field(..., min_length=20)

    @field_validator('address')
    def sanitize_address(cls, v):
        return sanitize_input(v)

class AddressResponse(BaseModel):
    address: str

# --- Products ---

class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    cost: float = Field(..., gt=0)
    rating: int = Field(0, ge=0, le=5)
    image: Optional[str] = None
    description: Optional[str] = None

    @field_validator('name', 'category', 'description')
    def sanitize_fields(cls, v):
        return sanitize_input(v)

class ProductResponse(BaseModel):
    id: str
    name: str
    category: str
    cost: float
    rating: int
    image: Optional[str] = None
    description: Optional[str] = None

class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int
    page: int
    limit: int

# --- Cart ---

class CartItemAdd(BaseModel):
    product_id: str = Field(..., pattern=OBJECT_ID_PATTERN)
    quantity: int = Field(..., ge=1)

class CartItemUpdate(BaseModel):
    product_id: str = Field(..., pattern=OBJECT_ID_PATTERN)
    # 0 removes the product from the cart
    quantity: int = Field(..., ge=0)

class CartItemResponse(BaseModel):
    product: ProductResponse
    quantity: int

class CartResponse(BaseModel):
    email: str
    cart_items: List[CartItemResponse]
    payment_option: str
    total: float
