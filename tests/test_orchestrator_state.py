"""Tests for orchestrator state module."""

from branch_lint.orchestrator.state import make_initial_state


class TestMakeInitialState:
    """Tests for the make_initial_state factory function."""

    def test_make_initial_state_defaults(self):
        """All 9 keys present with correct defaults."""
        state = make_initial_state("/tmp/repo", "main", "feature")

        assert state["repo_path"] == "/tmp/repo"
        assert state["base_branch"] == "main"
        assert state["compare_branch"] == "feature"
        assert state["files"] == []
        assert state["config_path"] is None
        assert state["env"] is None
        assert state["tool_result"] is None
        assert state["status"] is None
        assert state["errors"] == []

        assert len(state) == 9

    def test_initial_states_do_not_share_lists(self):
        first = make_initial_state("/a", "main", "x")
        second = make_initial_state("/b", "main", "y")
        first["errors"].append("boom")
        assert second["errors"] == []
