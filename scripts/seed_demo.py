#!/usr/bin/env python3
"""
Seed script to create demo accounts and menu data
"""

import asyncio


DEMO_USERS = [
    # username, email, password, role
    ("manager", "manager@system.com", "manager123", "manager"),
    ("staff", "staff@system.com", "staff123", "staff"),
    ("student", "student@campus.edu", "student123", "student"),
]

DEMO_MENU = [
    # name, category, price, description
    ("Classic Burger", "Mains", 5.99, "Beef patty, lettuce, tomato, house sauce"),
    ("Veggie Wrap", "Mains", 4.99, "Grilled vegetables and hummus in a flour tortilla"),
    ("Chicken Rice Bowl", "Mains", 6.49, "Teriyaki chicken over steamed rice"),
    ("Margherita Flatbread", "Mains", 5.49, "Tomato, mozzarella and basil"),
    ("French Fries", "Sides", 2.49, "Skin-on fries with sea salt"),
    ("Side Salad", "Sides", 2.99, "Mixed greens with vinaigrette"),
    ("Soda", "Drinks", 1.50, "Fountain drink, any flavour"),
    ("Iced Coffee", "Drinks", 2.75, "Cold brew over ice"),
    ("Chocolate Chip Cookie", "Desserts", 1.25, "Baked fresh every morning"),
]


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from campus_dining.database import SessionLocal, init_db
    from campus_dining.models.menu import MenuItem
    from campus_dining.models.user import User, UserRole
    from campus_dining.security import get_password_hash

    # Create tables
    await init_db()

    async with SessionLocal() as db:
        # Check if demo data already exists
        result = await db.execute(select(User).where(User.username == "manager"))
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo users...")

        for username, email, password, role in DEMO_USERS:
            db.add(
                User(
                    username=username,
                    email=email,
                    hashed_password=get_password_hash(password),
                    role=UserRole(role),
                    is_active=True,
                )
            )
            print(f"  {role}: {username} / {password}")

        print("Creating demo menu...")

        for name, category, price, description in DEMO_MENU:
            db.add(
                MenuItem(
                    name=name,
                    category=category,
                    price=price,
                    description=description,
                    available=True,
                    image=f"/uploads/{name.lower().replace(' ', '-')}.jpg",
                )
            )

        await db.commit()

        print(f"Created {len(DEMO_USERS)} users and {len(DEMO_MENU)} menu items")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
