from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def get_clock() -> Clock:
    """FastAPI dependency returning the time source used by the swap workflow.

    Tests override this to pin ``now``.
    """
    return datetime.utcnow
