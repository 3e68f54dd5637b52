import pytest

from watchtower import cgroup
from watchtower.cgroup import container_id_from_cgroup, get_running_container_id

CONTAINER_ID = "991b6b42691449d3ce90192ff9f006863dcdafc6195e227aeefa298235004377"

CGROUP_TEXT = f"""
15:name=systemd:/docker/{CONTAINER_ID}
14:misc:/
13:rdma:/docker/{CONTAINER_ID}
12:pids:/docker/{CONTAINER_ID}
11:hugetlb:/docker/{CONTAINER_ID}
10:net_prio:/docker/{CONTAINER_ID}
9:perf_event:/docker/{CONTAINER_ID}
8:net_cls:/docker/{CONTAINER_ID}
7:freezer:/docker/{CONTAINER_ID}
6:devices:/docker/{CONTAINER_ID}
5:blkio:/docker/{CONTAINER_ID}
4:cpuacct:/docker/{CONTAINER_ID}
3:cpu:/docker/{CONTAINER_ID}
2:cpuset:/docker/{CONTAINER_ID}
1:memory:/docker/{CONTAINER_ID}
0::/docker/{CONTAINER_ID}
"""


def test_matching_container_id_is_found():
    assert container_id_from_cgroup(CGROUP_TEXT) == CONTAINER_ID


def test_no_matching_container_id():
    assert container_id_from_cgroup("14:misc:/") == ""


def test_short_hash_does_not_match():
    assert container_id_from_cgroup("1:memory:/docker/abc123") == ""


def test_get_running_container_id_reads_cgroup_file(tmp_path, monkeypatch):
    cgroup_file = tmp_path / "cgroup"
    cgroup_file.write_text(CGROUP_TEXT)
    monkeypatch.setattr(cgroup, "_CGROUP_PATH_TEMPLATE", str(cgroup_file))
    assert get_running_container_id() == CONTAINER_ID


def test_get_running_container_id_outside_container(tmp_path, monkeypatch):
    cgroup_file = tmp_path / "cgroup"
    cgroup_file.write_text("0::/user.slice\n")
    monkeypatch.setattr(cgroup, "_CGROUP_PATH_TEMPLATE", str(cgroup_file))
    assert get_running_container_id() == ""


def test_get_running_container_id_missing_file(tmp_path, monkeypatch):
    monkeypatch.setattr(cgroup, "_CGROUP_PATH_TEMPLATE", str(tmp_path / "missing"))
    with pytest.raises(OSError):
        get_running_container_id()