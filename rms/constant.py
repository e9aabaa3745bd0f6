"""Editable static mock data for the restaurant."""

from __future__ import annotations

TABLE_COUNT = 12

MENU_CATEGORIES: list[str] = [
    "Appetizers",
    "Soups",
    "Salads",
    "Main Course",
    "Pasta",
    "Grill",
    "Seafood",
    "Sides",
    "Desserts",
    "Beverages",
]

MENU_ITEMS: list[dict[str, str | float | int]] = [
    {"id": "bev001", "name": "Classic Mojito", "category": "Beverages", "price": 349, "stock": 50,
     "image_url": "https://images.unsplash.com/photo-1551538850-eff712b341fe?q=80&w=800"},
    {"id": "bev002", "name": "Espresso", "category": "Beverages", "price": 149, "stock": 100,
     "image_url": "https://images.unsplash.com/photo-1599398054032-fe797479a1f3?q=80&w=800"},
    {"id": "app001", "name": "Bruschetta", "category": "Appetizers", "price": 299, "stock": 30,
     "image_url": "https://images.unsplash.com/photo-1505253716362-af78f5d115de?q=80&w=800"},
    {"id": "app002", "name": "Garlic Bread", "category": "Appetizers", "price": 229, "stock": 40,
     "image_url": "https://images.unsplash.com/photo-1627308595182-d721f451b315?q=80&w=800"},
    {"id": "main001", "name": "Margherita Pizza", "category": "Main Course", "price": 499, "stock": 25,
     "image_url": "https://images.unsplash.com/photo-1598021680133-eb3a1283ad24?q=80&w=800"},
    {"id": "pasta001", "name": "Spaghetti Carbonara", "category": "Pasta", "price": 549, "stock": 20,
     "image_url": "https://images.unsplash.com/photo-1608796319547-5b68dc454a25?q=80&w=800"},
    {"id": "grill001", "name": "Grilled Salmon", "category": "Grill", "price": 899, "stock": 15,
     "image_url": "https://images.unsplash.com/photo-1519708227418-c8fd9a32b7a2?q=80&w=800"},
    {"id": "des001", "name": "Tiramisu", "category": "Desserts", "price": 329, "stock": 18,
     "image_url": "https://images.unsplash.com/photo-1571877227200-a0d98ea607e9?q=80&w=800"},
    {"id": "des002", "name": "Chocolate Lava Cake", "category": "Desserts", "price": 349, "stock": 0,
     "image_url": "https://images.unsplash.com/photo-1586985289933-60a92a525145?q=80&w=800"},
]

# last_visit is an ISO date.
CUSTOMERS: list[dict[str, str | float | int]] = [
    {"id": "cust-1", "name": "John Doe", "phone": "1234567890", "total_spent": 12550, "visits": 5,
     "last_visit": "2024-05-10"},
    {"id": "cust-2", "name": "Jane Smith", "phone": "0987654321", "total_spent": 5800, "visits": 2,
     "last_visit": "2024-05-15"},
]

# days_ago is relative to startup.
EXPENSES: list[dict[str, str | float | int]] = [
    {"id": "exp-1", "description": "Electricity Bill", "amount": 5000, "category": "Utilities", "days_ago": 0},
    {"id": "exp-2", "description": "Vegetable Purchase", "amount": 8500, "category": "Supplies", "days_ago": 1},
]

STAFF: list[dict[str, str | float | bool]] = [
    {"id": "staff-1", "name": "Alice Johnson", "role": "Admin", "phone": "555-0101",
     "email": "alice@rmspro.io", "salary": 75000, "is_active": True},
    {"id": "staff-2", "name": "Bob Williams", "role": "Cashier", "phone": "555-0102",
     "email": "bob@rmspro.io", "salary": 40000, "is_active": True},
    {"id": "staff-3", "name": "Charlie Brown", "role": "Waiter", "phone": "555-0103",
     "email": "charlie@rmspro.io", "salary": 35000, "is_active": False},
    {"id": "staff-4", "name": "Diana Prince", "role": "Kitchen Staff", "phone": "555-0104",
     "email": "diana@rmspro.io", "salary": 45000, "is_active": True},
]

TAXES: list[dict[str, str | float | bool]] = [
    {"id": "tax-1", "name": "GST", "rate": 18, "enabled": True},
    {"id": "tax-2", "name": "Service Charge", "rate": 5, "enabled": False},
]

EXPENSE_CATEGORIES: list[str] = ["Utilities", "Rent", "Salaries", "Supplies", "Marketing", "Other"]

STAFF_ROLES: list[str] = ["Admin", "Cashier", "Waiter", "Kitchen Staff", "Inventory Manager"]
