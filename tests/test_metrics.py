from woo_settings_mcp.metrics import MetricsRecorder


def test_snapshot_and_reset():
    metrics = MetricsRecorder()
    metrics.incr_request()
    metrics.record_rpc("tools/call")
    metrics.record_rpc(None, error_code=-32700)
    metrics.record_tool("get_setting", success=True)
    metrics.record_tool("update_setting", success=False)
    metrics.record_setting_change("woocommerce_currency")

    data = metrics.snapshot()
    assert data["requests"] == 1
    assert data["rpc_methods"] == {"tools/call": 1, "<invalid>": 1}
    assert data["protocol_errors"] == {"-32700": 1}
    assert data["tool_success"] == {"get_setting": 1}
    assert data["tool_error"] == {"update_setting": 1}
    assert data["settings_changed"] == {"woocommerce_currency": 1}

    metrics.reset()
    data = metrics.snapshot()
    assert data["requests"] == 0
    assert data["rpc_methods"] == {}
    assert data["tool_success"] == {}


def test_recent_durations_are_bounded():
    metrics = MetricsRecorder(recent_limit=2)
    for index in range(3):
        metrics.record_duration(f"req-{index}", float(index))
    assert metrics.snapshot()["recent_request_durations_ms"] == {"req-1": 1.0, "req-2": 2.0}
