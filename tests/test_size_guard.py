import pytest

from devgod.config_loader import SizeGuardConfig
from devgod.size_guard import DiffStat, SizeVerdict, classify, parse_numstat


@pytest.mark.parametrize(
    "files, added, deleted, verdict",
    [
        (21, 0, 0, SizeVerdict.BLOCKED),
        (3, 300, 101, SizeVerdict.BLOCKED),
        (25, 300, 150, SizeVerdict.BLOCKED),
        (11, 50, 10, SizeVerdict.WARN),
        (2, 150, 51, SizeVerdict.WARN),
        (3, 20, 5, SizeVerdict.IDEAL),
        (10, 100, 100, SizeVerdict.IDEAL),
        (20, 200, 200, SizeVerdict.WARN),
    ],
)
def test_classify(files, added, deleted, verdict):
    stat = DiffStat(files_changed=files, lines_added=added, lines_deleted=deleted)
    assert classify(stat) == verdict


def test_classify_uses_configured_limits():
    limits = SizeGuardConfig(soft_files_max=2, soft_lines_max=20, hard_files_max=4, hard_lines_max=40)
    assert classify(DiffStat(files_changed=3), limits) == SizeVerdict.WARN
    assert classify(DiffStat(files_changed=1, lines_added=41), limits) == SizeVerdict.BLOCKED


def test_size_guard_config_rejects_inverted_tiers():
    with pytest.raises(ValueError):
        SizeGuardConfig(soft_files_max=30, hard_files_max=20)


def test_parse_numstat():
    output = (
        "10\t2\tsrc/app.py\n"
        "-\t-\tassets/logo.png\n"
        "\n"
        "3\t0\tdocs/readme.md\n"
        "garbage line\n"
    )
    stat = parse_numstat(output)
    assert stat == DiffStat(files_changed=3, lines_added=13, lines_deleted=2)
    assert stat.total_lines == 15


def test_parse_numstat_empty():
    assert parse_numstat("") == DiffStat()
