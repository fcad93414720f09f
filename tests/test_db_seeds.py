from permit_fees.db import _script_statements


def test_script_statements_drop_transaction_control_and_comments():
    script = """
    -- reference rows
    BEGIN;
    INSERT INTO prescribed_activities (id) VALUES ('a');
    INSERT INTO prescribed_activities (id) VALUES ('b');
    COMMIT;
    """
    statements = _script_statements(script)
    assert statements == [
        "INSERT INTO prescribed_activities (id) VALUES ('a')",
        "INSERT INTO prescribed_activities (id) VALUES ('b')",
    ]
