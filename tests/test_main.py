"""
Tests for the command line entry points
"""
import pytest

from vpa_advisor import main


@pytest.fixture
def patched_client(monkeypatch, fake_cluster):
    """Route the CLI to the in-memory cluster"""
    fake_cluster.initialize = lambda: None
    monkeypatch.setattr(main, "K8sClient", lambda settings: fake_cluster)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return fake_cluster


class TestManageVpasCommand:
    """Tests for manage-vpas"""

    def test_creates_vpas(self, patched_client):
        patched_client.add_workload("shop", "Deployment", "web")

        main.manage_vpas()

        assert [ns for ns, _ in patched_client.created] == ["shop"]

    def test_namespaces_flag(self, patched_client):
        patched_client.add_workload("shop", "Deployment", "web")
        patched_client.add_workload("other", "Deployment", "api")

        main.manage_vpas(namespaces="other")

        assert [ns for ns, _ in patched_client.created] == ["other"]

    def test_cluster_error_exits_non_zero(self, patched_client, capsys):
        patched_client.failing.add("list_namespaces")

        with pytest.raises(SystemExit) as exc_info:
            main.manage_vpas()

        assert exc_info.value.code == 1
        assert "list_namespaces failed" in capsys.readouterr().err

    def test_bad_log_level_exits_non_zero(self, patched_client, monkeypatch, capsys):
        monkeypatch.setenv("LOG_LEVEL", "loud")

        with pytest.raises(SystemExit) as exc_info:
            main.manage_vpas()

        assert exc_info.value.code == 1
        assert "Invalid configuration" in capsys.readouterr().err
        assert patched_client.calls == []

    def test_empty_log_level_runs(self, patched_client, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "")
        patched_client.add_workload("shop", "Deployment", "web")

        main.manage_vpas()

        assert [ns for ns, _ in patched_client.created] == ["shop"]


class TestGetRecommendationsCommand:
    """Tests for get-recommendations"""

    def test_writes_results_file(self, patched_client, monkeypatch, tmp_path):
        path = tmp_path / "results.csv"
        monkeypatch.setenv("RESULTS_FILE", str(path))
        patched_client.namespaces = ["shop"]

        main.get_recommendations()

        assert path.read_text().splitlines() == [
            "namespace,resourceType,resourceName,containerName,targetCPU,targetMemory,"
            "currentCPU,currentMemory,cpuDiff,memDiff,hpaEnabled"
        ]

    def test_write_error_exits_non_zero(self, patched_client, monkeypatch, tmp_path):
        monkeypatch.setenv("RESULTS_FILE", str(tmp_path / "no-such-dir" / "results.csv"))

        with pytest.raises(SystemExit) as exc_info:
            main.get_recommendations(namespaces="shop")

        assert exc_info.value.code == 1
