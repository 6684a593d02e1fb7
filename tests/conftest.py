"""Shared fixtures: canned pfctl output and fetcher test doubles."""

import subprocess
import threading
import time

import pytest

from pf_exporter.collector.base import SnapshotFetcher
from pf_exporter.errors import FetchError
from pf_exporter.metrics import StateCounters, StatisticsSnapshot

OPENBSD_INFO = """\
Status: Enabled for 3 days 04:12:55              Debug: err

Hostid:   0x7a3e2a7b
Checksum: 0x1c0c5e2f8d1b7c3e9a4f6b2d0e8c1a57

Interface Stats for em0               IPv4             IPv6
  Bytes In                        912345678            45678
  Bytes Out                       123456789            12345
  Packets In
    Passed                          1234567              321
    Blocked                            4321                7
  Packets Out
    Passed                          1134567              300
    Blocked                              12                0

State Table                          Total             Rate
  current entries                      283
  half-open tcp                          2
  searches                        30146812          109.4/s
  inserts                           978123            3.6/s
  removals                          977840            3.6/s
Counters
  match                             981187            3.6/s
  bad-offset                             0            0.0/s
  fragment                              11            0.0/s
"""

FREEBSD_INFO_NO_LOGINTERFACE = """\
Status: Enabled for 0 days 00:19:22           Debug: Urgent

State Table                          Total             Rate
  current entries                       28
  searches                          301468          259.4/s
  inserts                              978            0.8/s
  removals                             950            0.8/s
Counters
  match                               1187            1.0/s
  bad-offset                             0            0.0/s
"""

# Only root queues name the interface; children name their parent
OPENBSD_QUEUES = """\
queue rootq on em0 bandwidth 1G max 1G qlimit 50
  [ pkts:       1300  bytes:     574290  dropped pkts:      3 bytes:    192 ]
  [ qlength:   0/ 50 ]
queue std parent rootq bandwidth 100M default qlimit 50
  [ pkts:       1234  bytes:     567890  dropped pkts:      2 bytes:    128 ]
  [ qlength:   0/ 50 ]
queue ssh parent rootq bandwidth 10M qlimit 50
  [ pkts:         55  bytes:       6400  dropped pkts:      1 bytes:     64 ]
  [ qlength:   0/ 50 ]
queue ssh_bulk parent ssh bandwidth 5M qlimit 50
  [ pkts:         11  bytes:       1100  dropped pkts:      0 bytes:      0 ]
  [ qlength:   0/ 50 ]
queue lanq on em1 bandwidth 1G max 1G qlimit 50
  [ pkts:          9  bytes:        900  dropped pkts:      0 bytes:      0 ]
  [ qlength:   0/ 50 ]
"""

FREEBSD_ALTQ_QUEUES = """\
queue root_em0 on em0 bandwidth 1Gb priority 0 cbq( wrr root ) {std, ssh}
  [ pkts:          0  bytes:          0  dropped pkts:      0 bytes:      0 ]
  [ qlength:   0/ 50  borrows:      0  suspends:      0 ]
queue  std on em0 bandwidth 500Mb cbq( default )
  [ pkts:        420  bytes:      31337  dropped pkts:      2 bytes:    128 ]
  [ qlength:   0/ 50  borrows:      0  suspends:      0 ]
"""


class FakePfctl:
    """Stands in for the pfctl binary, returning canned output."""

    def __init__(self, info=OPENBSD_INFO, queues=OPENBSD_QUEUES, fail=()):
        self.outputs = {"info": info, "queue": queues}
        self.fail = set(fail)
        self.calls = []

    def __call__(self, argv):
        self.calls.append(argv)
        what = argv[2]
        if what in self.fail:
            raise subprocess.CalledProcessError(
                1, argv, output="", stderr="pfctl: DIOCGETSTATUS: Permission denied"
            )
        return self.outputs[what]


class StaticFetcher(SnapshotFetcher):

    def __init__(self, snapshot=None):
        self.snapshot = snapshot or StatisticsSnapshot(
            state=StateCounters(total=10, searches=100, inserts=50, removals=40),
        )
        self.calls = 0
        self.closed = False

    def fetch(self):
        self.calls += 1
        return self.snapshot

    def name(self):
        return "static"

    def close(self):
        self.closed = True


class FailingFetcher(SnapshotFetcher):

    def fetch(self):
        raise FetchError("failed to get pf stats", details="ioctl: Operation not permitted")

    def name(self):
        return "failing"


class SlowFetcher(SnapshotFetcher):
    """Counts callers inside fetch() to detect overlapping reads."""

    def __init__(self, delay: float = 0.05):
        self._delay = delay
        self._guard = threading.Lock()
        self.active = 0
        self.max_active = 0
        self.calls = 0

    def fetch(self):
        with self._guard:
            self.active += 1
            self.calls += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self._delay)
        with self._guard:
            self.active -= 1
        return StatisticsSnapshot()

    def name(self):
        return "slow"


@pytest.fixture
def openbsd_info():
    return OPENBSD_INFO


@pytest.fixture
def freebsd_info():
    return FREEBSD_INFO_NO_LOGINTERFACE


@pytest.fixture
def openbsd_queues():
    return OPENBSD_QUEUES


@pytest.fixture
def freebsd_queues():
    return FREEBSD_ALTQ_QUEUES


@pytest.fixture
def fake_pfctl():
    """Factory: fake_pfctl(info=..., queues=..., fail={"queue"})."""
    return FakePfctl


@pytest.fixture
def static_fetcher():
    """Factory: static_fetcher(snapshot=None)."""
    return StaticFetcher


@pytest.fixture
def failing_fetcher():
    return FailingFetcher()


@pytest.fixture
def slow_fetcher():
    return SlowFetcher()


@pytest.fixture
def device(tmp_path):
    """A readable file standing in for /dev/pf."""
    path = tmp_path / "pf"
    path.write_text("")
    return str(path)
