from rest_framework.throttling import UserRateThrottle, AnonRateThrottle


class BurstRateThrottle(UserRateThrottle):
    """
    Short window limit for every client.
    Scope: 'burst'
    """
    scope = 'burst'


class SustainedRateThrottle(UserRateThrottle):
    """
    General API usage.
    """
    scope = 'sustained'


class OTPRateThrottle(AnonRateThrottle):
    """
    Strict per-IP limit for OTP generation and login attempts.
    """
    scope = 'otp'
