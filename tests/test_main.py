#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Danfoss Ally Entry Point Tests

Runs the async main routine end to end against a Mock session and checks the
exit status for success and for each failure class.

License: MIT
"""

import asyncio
import logging
import time

import pytest
import requests

import danfoss_ally_utils.__main__ as main_mod
from danfoss_ally_utils.client import Client


@pytest.fixture
def env(monkeypatch, tmp_path):
    """隔离 .env 文件并设置有效凭据"""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DANFOSS_API_KEY", "key")
    monkeypatch.setenv("DANFOSS_API_SECRET", "secret")
    monkeypatch.setenv("DANFOSS_LOG_LEVEL", "DEBUG")
    monkeypatch.delenv("DANFOSS_POLLING_INTERVAL", raising=False)
    return monkeypatch


@pytest.fixture
def patched_client(env, session):
    """让 main 创建的客户端使用 Mock 会话"""
    env.setattr(main_mod, "Client", lambda config: Client(config, session))
    return session


def test_main_success(patched_client, caplog):
    with caplog.at_level(logging.DEBUG):
        status = asyncio.run(main_mod.main([]))

    assert status == 0
    patched_client.post.assert_called_once()
    patched_client.request.assert_called_once()
    patched_client.close.assert_called_once()
    assert "Living room: 215" in caplog.text
    assert "Bedroom: 189" in caplog.text


def test_main_missing_credentials(env, session, caplog):
    env.delenv("DANFOSS_API_KEY")
    env.setattr(main_mod, "Client", lambda config: Client(config, session))

    status = asyncio.run(main_mod.main([]))

    assert status == 1
    session.post.assert_not_called()
    assert "ConfigurationError" in caplog.text


def test_main_authentication_failure(patched_client, response_factory, caplog):
    patched_client.post.return_value = response_factory({"error": "invalid_client"}, status_code=401)

    status = asyncio.run(main_mod.main([]))

    assert status == 1
    patched_client.request.assert_not_called()
    assert "AuthenticationError" in caplog.text


def test_main_transport_failure(patched_client, caplog):
    patched_client.request.side_effect = requests.ConnectionError("unreachable")

    assert asyncio.run(main_mod.main([])) == 1
    assert "TransportError" in caplog.text


def test_main_poll_mode(patched_client, env):
    env.setenv("DANFOSS_POLLING_INTERVAL", "0.01")

    status = asyncio.run(main_mod.main(["--poll", "--iterations", "2"]))

    assert status == 0
    assert patched_client.request.call_count == 2
    assert patched_client.post.call_count == 1


def test_cli_exit_status(env, monkeypatch):
    env.delenv("DANFOSS_API_SECRET")
    monkeypatch.setattr("sys.argv", ["danfoss-ally"])
    with pytest.raises(SystemExit) as excinfo:
        main_mod.cli()
    assert excinfo.value.code == 1


def test_main_log_level_from_dotenv(patched_client, env, tmp_path):
    """只在 .env 中设置的 DANFOSS_LOG_LEVEL 也会生效"""
    env.delenv("DANFOSS_LOG_LEVEL")
    (tmp_path / ".env").write_text("DANFOSS_LOG_LEVEL=warning\n")
    levels = []
    env.setattr(main_mod, "configure_logging", levels.append)

    assert asyncio.run(main_mod.main([])) == 0
    assert levels == ["WARNING"]


def test_main_cancel_stops_polling_thread(patched_client, env):
    """取消 main 后轮询线程退出，asyncio.run 不会卡在关闭线程池"""
    env.setenv("DANFOSS_POLLING_INTERVAL", "60")

    async def cancel_after_first_round():
        task = asyncio.create_task(main_mod.main(["--poll"]))
        while patched_client.request.call_count == 0:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    started = time.monotonic()
    asyncio.run(cancel_after_first_round())

    assert time.monotonic() - started < 10
    assert patched_client.request.call_count == 1
    patched_client.close.assert_called_once()
