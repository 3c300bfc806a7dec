from rest_framework.permissions import SAFE_METHODS
from rest_framework.throttling import SimpleRateThrottle


class ClientRateThrottle(SimpleRateThrottle):
    """Write rate limit keyed by client address (the API has no user accounts).

    Reads pass through untouched, so detail views can share one throttle
    for GET and PUT/DELETE.
    """

    def allow_request(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return super().allow_request(request, view)

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': self.get_ident(request)}


class PatientWriteThrottle(ClientRateThrottle):
    scope = 'patient_write'


class PrescriptionWriteThrottle(ClientRateThrottle):
    scope = 'prescription_write'
