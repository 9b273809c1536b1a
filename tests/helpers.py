from datetime import datetime, timedelta

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123456789"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef012345678"


class FakeClock:
    """Callable clock the codec reads instead of the wall clock."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def user_payload(**overrides) -> dict:
    payload = {
        "userName": "alice",
        "email": "alice@x.com",
        "password": "pw123456789",
        "fullName": "Alice Liddell",
        "dateOfBirth": "1990-05-17",
        "phoneNumber": "+15550100",
        "address": "1 Main St",
    }
    payload.update(overrides)
    return payload


def make_config(tmp_path, **overrides) -> dict:
    config = {
        "DATABASE_URL": f"sqlite:///{tmp_path / 'test.db'}",
        "JWT_ACCESS_SECRET": ACCESS_SECRET,
        "JWT_REFRESH_SECRET": REFRESH_SECRET,
        "API_KEY": None,
    }
    config.update(overrides)
    return config


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
