"""
Add the partial unique index that stops two live appointments from holding
the same doctor + appointment_time.

Index:
- uq_appointments_doctor_time_active ON appointments (doctor_id, appointment_time)
  WHERE status NOT IN ('rejected', 'cancelled')

Databases created by create_all already have it. Older databases may hold
double bookings from before the index existed; those are listed and the
migration stops so staff can cancel or reject the extra rows first.
"""

# Ensure this script can be run directly from the repo root
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).resolve().parent
ROOT_DIR = CURRENT_DIR.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sqlalchemy import text  # noqa: E402

DUPLICATES_SQL = """
    SELECT doctor_id, appointment_time, COUNT(*) AS holders
    FROM appointments
    WHERE status NOT IN ('rejected', 'cancelled')
    GROUP BY doctor_id, appointment_time
    HAVING COUNT(*) > 1
"""

CREATE_INDEX_SQL = """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_doctor_time_active
    ON appointments (doctor_id, appointment_time)
    WHERE status NOT IN ('rejected', 'cancelled')
"""


def find_double_bookings(conn) -> list[tuple]:
    return [tuple(row) for row in conn.execute(text(DUPLICATES_SQL))]


def upgrade(target_engine=None) -> bool:
    """Returns False without changing anything if double bookings exist"""
    if target_engine is None:
        from clinic.database import engine as target_engine

    with target_engine.connect() as conn:
        duplicates = find_double_bookings(conn)
        if duplicates:
            print("Cannot add uq_appointments_doctor_time_active, slots held more than once:")
            for doctor_id, appointment_time, holders in duplicates:
                print(f"  doctor {doctor_id} at {appointment_time}: {holders} live appointments")
            return False

        conn.execute(text(CREATE_INDEX_SQL))
        conn.commit()
        print("Migration add_active_slot_unique_index applied successfully")
        return True


if __name__ == "__main__":
    sys.exit(0 if upgrade() else 1)
