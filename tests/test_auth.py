from datetime import datetime, timedelta

import pytest

from utils.auth import PENDING_OTP_KEY, SESSION_KEY, AuthManager, SessionContext
from utils.sample_order_reporting.models import ViewerRole


class FakeEmailService:

    def __init__(self, ok=True):
        self.ok = ok
        self.sent = []

    def send_otp(self, to_email, name, code, ttl_minutes):
        self.sent.append((to_email, code))
        return (True, "sent") if self.ok else (False, "Email configuration missing")

    @property
    def last_code(self):
        return self.sent[-1][1]


class FakeClock:

    def __init__(self):
        self.now = datetime(2025, 1, 10, 9, 0, 0)

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mailer():
    return FakeEmailService()


@pytest.fixture
def auth(directory, mailer, clock):
    return AuthManager(store={}, directory=directory, email_service=mailer, clock=clock)


class TestRequestOtp:

    def test_active_sales_user_gets_a_code(self, auth, mailer):
        ok, result = auth.request_otp(' e1@x.com ')
        assert ok, result
        code = mailer.last_code
        assert len(code) == 6 and code.isdigit()
        pending = auth.store[PENDING_OTP_KEY]
        assert 'code' not in pending
        assert pending['hash'] != code

    @pytest.mark.parametrize('email', ['e4@x.com', 'ops@x.com', 'ghost@x.com', ''])
    def test_rejected_users(self, auth, mailer, email):
        ok, result = auth.request_otp(email)
        assert not ok
        assert 'error' in result
        assert mailer.sent == []

    def test_mail_failure_is_reported(self, directory, clock):
        auth = AuthManager(store={}, directory=directory, email_service=FakeEmailService(ok=False), clock=clock)
        ok, result = auth.request_otp('e1@x.com')
        assert not ok
        assert PENDING_OTP_KEY not in auth.store


class TestVerifyOtp:

    def test_correct_code_starts_session(self, auth, mailer):
        auth.request_otp('rm1@x.com')
        ok, context = auth.verify_otp('rm1@x.com', mailer.last_code)

        assert ok
        assert isinstance(context, SessionContext)
        assert context.role == ViewerRole.REPORTING_MANAGER
        assert context.name == 'Ravi One'
        assert SESSION_KEY in auth.store
        assert PENDING_OTP_KEY not in auth.store

    def test_wrong_code_is_rejected(self, auth, mailer):
        auth.request_otp('e1@x.com')
        wrong = '000000' if mailer.last_code != '000000' else '111111'
        ok, result = auth.verify_otp('e1@x.com', wrong)
        assert not ok
        assert SESSION_KEY not in auth.store

    def test_code_is_discarded_after_too_many_wrong_guesses(self, auth, mailer):
        auth.request_otp('e1@x.com')
        code = mailer.last_code
        wrong = '000000' if code != '000000' else '111111'

        for _ in range(auth.max_otp_attempts):
            ok, _ = auth.verify_otp('e1@x.com', wrong)
            assert not ok

        assert PENDING_OTP_KEY not in auth.store
        ok, result = auth.verify_otp('e1@x.com', code)
        assert not ok
        assert result['error'] == "Invalid or expired OTP. Please try again."

    def test_wrong_guesses_below_the_limit_keep_the_code(self, auth, mailer):
        auth.request_otp('e1@x.com')
        code = mailer.last_code
        wrong = '000000' if code != '000000' else '111111'

        for _ in range(auth.max_otp_attempts - 1):
            auth.verify_otp('e1@x.com', wrong)

        assert auth.store[PENDING_OTP_KEY]['attempts'] == auth.max_otp_attempts - 1
        ok, _ = auth.verify_otp('e1@x.com', code)
        assert ok

    def test_expired_code_is_rejected(self, auth, mailer, clock):
        auth.request_otp('e1@x.com')
        clock.now += timedelta(minutes=11)
        ok, _ = auth.verify_otp('e1@x.com', mailer.last_code)
        assert not ok

    def test_code_is_bound_to_email(self, auth, mailer):
        auth.request_otp('e1@x.com')
        ok, _ = auth.verify_otp('e3@x.com', mailer.last_code)
        assert not ok

    def test_user_without_role_is_rejected(self, auth, mailer, directory, monkeypatch):
        auth.request_otp('e1@x.com')
        monkeypatch.setattr('utils.auth.classify_role', lambda d, e: None)
        ok, result = auth.verify_otp('e1@x.com', mailer.last_code)
        assert not ok
        assert 'user type' in result['error']


class TestSession:

    def _login(self, auth, mailer, email='zm@x.com'):
        auth.request_otp(email)
        ok, context = auth.verify_otp(email, mailer.last_code)
        assert ok
        return context

    def test_session_hydrates_from_store(self, auth, mailer, directory, clock):
        context = self._login(auth, mailer)
        fresh = AuthManager(store=auth.store, directory=directory, email_service=mailer, clock=clock)
        restored = fresh.get_session()
        assert restored == context
        assert restored.role == ViewerRole.ZONAL_MANAGER

    def test_session_times_out(self, auth, mailer, clock):
        self._login(auth, mailer)
        clock.now += timedelta(hours=8, minutes=1)
        assert auth.get_session() is None
        assert SESSION_KEY not in auth.store

    def test_logout_clears_session_and_cache(self, auth, mailer):
        self._login(auth, mailer)
        auth.store['dashboard_cache_sample_x'] = '{}'
        auth.store['unrelated'] = 1

        auth.logout()

        assert not auth.check_session()
        assert 'dashboard_cache_sample_x' not in auth.store
        assert auth.store['unrelated'] == 1

    def test_corrupt_session_is_discarded(self, auth):
        auth.store[SESSION_KEY] = {'email': 'e1@x.com', 'role': 'boss', 'login_time': 'yesterday'}
        assert auth.get_session() is None
        assert SESSION_KEY not in auth.store


class TestPasscodeHelpers:

    def test_hash_round_trip(self, auth):
        code_hash, salt = auth.hash_code('123456')
        assert auth.verify_code('123456', code_hash, salt)
        assert not auth.verify_code('123457', code_hash, salt)

    def test_salt_changes_hash(self, auth):
        first, _ = auth.hash_code('123456')
        second, _ = auth.hash_code('123456')
        assert first != second

    def test_email_service_without_credentials(self):
        from utils.otp_email import OtpEmailService

        service = OtpEmailService({'host': 'smtp.invalid'})
        assert service.send_otp('e1@x.com', 'Esha', '123456', 10) == (False, "Email configuration missing")
