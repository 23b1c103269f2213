"""
Per-doctor critical sections.

Booking and slot edits read the doctor's calendar, compute a new one and write
it back. Within one process these run under a lock keyed by doctor id; across
processes the doctor row is additionally locked with SELECT ... FOR UPDATE
(see DoctorRepository.get_doctor_for_update).
"""

import logging
from contextlib import contextmanager
from threading import Lock

logger = logging.getLogger(__name__)

_doctor_locks: dict[int, Lock] = {}
_registry_lock = Lock()


def get_doctor_lock(doctor_id: int) -> Lock:
    with _registry_lock:
        lock = _doctor_locks.get(doctor_id)
        if lock is None:
            lock = Lock()
            _doctor_locks[doctor_id] = lock
        return lock


@contextmanager
def doctor_lock(doctor_id: int):
    lock = get_doctor_lock(doctor_id)
    lock.acquire()
    try:
        yield
    finally:
        lock.release()
