from boardwise.engine import MAX_LOG_ENTRIES
from boardwise.engine.events import LOG_ROLL, MSG_DICE_ROLLED, append_log


def test_log_is_newest_first_and_capped():
    logs = []
    for roll in range(MAX_LOG_ENTRIES + 10):
        logs = append_log(logs, MSG_DICE_ROLLED, LOG_ROLL, {"roll": roll})
    assert len(logs) == MAX_LOG_ENTRIES
    assert logs[0].message_params["roll"] == MAX_LOG_ENTRIES + 9
    assert logs[-1].message_params["roll"] == 10
    assert len({e.id for e in logs}) == MAX_LOG_ENTRIES
