import pytest

from pgbackup.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("discovery_failed", host="postgres", user="n8n_user", database="n8n_db")

    assert "Could not fetch database list from postgres" in message
    assert "Suggested action: Verify that n8n_db exists" in message


def test_actionable_error_rejects_unknown_code():
    with pytest.raises(KeyError):
        actionable_error("not_a_code")
