import asyncio
import time
from enum import Enum

from core.errors import MissingNumericBackend
from pikaid.codec import encode, parse
from pikaid.engine import CONVERTERS, get_capabilities, get_converter
from utils.timestamp import format_timestamp

class Status(Enum):
    OK = "healthy"
    DEGRADED = "degraded"
    FAIL = "unhealthy"

class CheckResult:
    __slots__ = ("name", "status", "msg")

    def __init__(self, name, status, msg=""):
        self.name = name
        self.status = status
        self.msg = msg

    def to_dict(self):
        return {"name": self.name,
                "status": self.status.value,
                "msg": self.msg}

class HealthReport:
    __slots__ = ("status", "checks", "uptime", "timestamp")

    def __init__(self, status, checks, uptime=0):
        self.status = status
        self.checks = checks
        self.uptime = uptime
        self.timestamp = format_timestamp()

    def to_dict(self):
        return {"status": self.status.value,
                "timestamp": self.timestamp,
                "uptime": round(self.uptime, 1),
                "checks": [check.to_dict() for check in self.checks]}

class HealthChecker:
    def __init__(self, ttl=1.0):
        self._checks = {}
        self._cache = None
        self._cache_time = 0
        self._ttl = ttl
        self._start_time = time.time()

    @property
    def uptime(self):
        return time.time() - self._start_time

    def register(self, name, check_fn, critical=True):
        self._checks[name] = (check_fn, critical)

    async def check(self):
        now = time.time()
        if self._cache and now - self._cache_time < self._ttl:
            return self._cache

        results = []
        for name, (check_fn, is_critical) in self._checks.items():
            try:
                result = await asyncio.wait_for(check_fn(), timeout=5)
            except asyncio.TimeoutError:
                result = CheckResult(name, Status.FAIL, "timeout")
            except Exception as exc:
                result = CheckResult(name, Status.FAIL, str(exc))
            results.append((result, is_critical))

        status = Status.OK
        for result, is_critical in results:
            if result.status == Status.FAIL and is_critical:
                status = Status.FAIL
            elif result.status != Status.OK and status == Status.OK:
                status = Status.DEGRADED

        self._cache = HealthReport(status, [result for result, _ in results], now - self._start_time)
        self._cache_time = now
        return self._cache

# Checks
async def check_event_loop():
    await asyncio.sleep(0)
    return CheckResult("loop", Status.OK)

def create_backend_check(resolve=get_converter, capabilities=get_capabilities):
    async def check():
        try:
            converter = resolve()
        except MissingNumericBackend as exc:
            return CheckResult("backend", Status.FAIL, str(exc))

        # running on the fallback although native was asked for
        caps = capabilities()
        if converter.name != "native" and "native" in caps.order:
            return CheckResult("backend", Status.DEGRADED, f"fallback:{converter.name}")

        return CheckResult("backend", Status.OK, converter.name)
    return check

def create_codec_check(capabilities=get_capabilities):
    probe = bytes(range(0xf4, 0x100))

    async def check():
        caps = capabilities()
        converters = [cls() for name, cls in CONVERTERS.items() if caps.available(name)]
        if not converters:
            return CheckResult("codec", Status.FAIL, "no backend")

        encoded = {converter.name: encode(0, probe, converter) for converter in converters}
        if len(set(encoded.values())) > 1:
            return CheckResult("codec", Status.FAIL, "backends disagree")

        for converter in converters:
            if parse(encoded[converter.name], converter).randomness != probe.hex():
                return CheckResult("codec", Status.FAIL, f"{converter.name} round-trip")

        return CheckResult("codec", Status.OK, "+".join(sorted(encoded)))
    return check
