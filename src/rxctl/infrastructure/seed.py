"""Demo patients and formulary for a fresh database.

Each table is seeded only when it is empty, so re-running is harmless.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select

from rxctl.infrastructure.database.schema import medications, patients

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

SEED_PATIENTS: tuple[dict[str, Any], ...] = (
    {
        "name": "John Smith",
        "birth_date": "1985-04-12",
        "phone": "416-555-0199",
        "email": "john.s@email.com",
        "address": "123 Maple Dr",
        "city": "Toronto",
        "state": "ON",
        "postal_code": "M5V 2T6",
        "health_card_num": "123-456-789-AB",
        "allergies": "Penicillin",
        "insurance_provider": "SunLife",
        "insurance_id": "SL-998877",
    },
    {
        "name": "Sarah Conner",
        "birth_date": "1992-08-23",
        "phone": "604-555-0122",
        "email": "s.conner@skynet.net",
        "address": "4500 Robson St",
        "city": "Vancouver",
        "state": "BC",
        "postal_code": "V6B 3K9",
        "health_card_num": "987-654-321-CC",
        "allergies": "Peanuts, Latex",
        "insurance_provider": "Manulife",
        "insurance_id": "MN-112233",
    },
    {
        "name": "Arthur Dent",
        "birth_date": "1978-02-11",
        "phone": "905-555-4242",
        "email": "arthur@hitchhiker.com",
        "address": "155 Country Ln",
        "city": "Mississauga",
        "state": "ON",
        "postal_code": "L5B 2C9",
        "health_card_num": "424-242-424-ZZ",
        "allergies": None,
        "insurance_provider": None,
        "insurance_id": None,
    },
    {
        "name": "Wayne Campbell",
        "birth_date": "1990-01-01",
        "phone": "630-555-1010",
        "email": "wayne@aurora.com",
        "address": "101 Stan Mikita Way",
        "city": "Aurora",
        "state": "IL",
        "postal_code": "60506",
        "health_card_num": "101-010-101-WW",
        "allergies": "Advil",
        "insurance_provider": "BlueCross",
        "insurance_id": "BC-555111",
    },
    {
        "name": "Geralt Rivera",
        "birth_date": "1955-11-30",
        "phone": "212-555-1980",
        "email": "geralt@news.com",
        "address": "55 West St",
        "city": "New York",
        "state": "NY",
        "postal_code": "10001",
        "health_card_num": "555-999-000-XX",
        "allergies": "Sulfa Drugs",
        "insurance_provider": "Aetna",
        "insurance_id": "AE-334455",
    },
)

# (name, din, ndc, description, stock, price, expiration)
SEED_MEDICATIONS: tuple[tuple[str, str, str, str, int, float, str], ...] = (
    ("Amoxicillin 500mg", "02238888", "00000-111-22", "Shelf A1", 500, 12.99, "2025-12-31"),
    ("Atorvastatin 20mg", "02245555", "55555-333-44", "Shelf B3", 200, 45.50, "2026-06-15"),
    ("Metformin 500mg", "02111222", "12345-678-90", "Shelf A2", 1000, 8.25, "2024-11-30"),
    ("Lisinopril 10mg", "02333444", "98765-432-10", "Shelf C1", 30, 15.00, "2023-10-01"),
    ("Escitalopram 10mg", "02444555", "11223-344-55", "Shelf B2", 150, 22.75, "2025-05-20"),
)


def seed_database(engine: Engine) -> dict[str, int]:
    """Insert demo rows into empty tables. Returns counts inserted per table."""
    inserted = {"patients": 0, "medications": 0}
    with engine.begin() as conn:
        if conn.execute(select(func.count(patients.c.id))).scalar_one() == 0:
            conn.execute(insert(patients), list(SEED_PATIENTS))
            inserted["patients"] = len(SEED_PATIENTS)

        if conn.execute(select(func.count(medications.c.id))).scalar_one() == 0:
            conn.execute(
                insert(medications),
                [
                    {
                        "name": name,
                        "din": din,
                        "ndc": ndc,
                        "description": description,
                        "stock": stock,
                        "price": price,
                        "expiration": expiration,
                    }
                    for name, din, ndc, description, stock, price, expiration in SEED_MEDICATIONS
                ],
            )
            inserted["medications"] = len(SEED_MEDICATIONS)
    return inserted
