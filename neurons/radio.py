"""
POI radio process: serve the relay for peer messages and run the block
scheduler until interrupted, a check decides, or (optionally) POIs diverge.
"""

import signal
import threading
from typing import Optional, Tuple

import bittensor as bt
import uvicorn

from poi_radio.p2p.relay.app import create_app
from poi_radio.radio.checks import CHECKS, CheckHook
from poi_radio.radio.config import RadioEnvConfig, load_radio_env
from poi_radio.radio.context import RadioContext, build_context
from poi_radio.radio.scheduler import BlockScheduler, PoiDivergedError
from poi_radio.utils.config import config as radio_config


def _make_keypair(config: bt.Config, env_cfg: RadioEnvConfig) -> bt.Keypair:
    if config.radio.use_wallet:
        return bt.Wallet(config=config).hotkey
    mnemonic = env_cfg.mnemonic
    if not mnemonic:
        bt.logging.warning("POI_RADIO_MNEMONIC is not set; using an ephemeral identity with no registered stake.")
        mnemonic = bt.Keypair.generate_mnemonic()
    return bt.Keypair.create_from_mnemonic(mnemonic)


def _build_check(config: bt.Config, ctx: RadioContext) -> Optional[CheckHook]:
    name = config.radio.check
    if not name:
        return None
    count = int(config.radio.count)
    if name in ("topics_present", "topics_absent"):
        check = CHECKS[name](ctx.topics, count=count)
    elif name == "skip_messages_from_self":
        check = CHECKS[name](ctx.own_address, count=count)
    else:
        check = CHECKS[name](count=count)
    bt.logging.info(f"Running check {name} (waits for {count} messages)")
    return CheckHook(check, ctx.stop_event)


def _serve_relay(ctx: RadioContext) -> Tuple[uvicorn.Server, threading.Thread]:
    app = create_app(
        ctx.buffer,
        own_address=ctx.own_address,
        topics=ctx.topics,
        radio_name=ctx.config.radio_name,
        max_message_age_s=ctx.config.max_message_age_s,
    )
    server = uvicorn.Server(
        uvicorn.Config(app, host=ctx.config.listen_host, port=ctx.config.listen_port, log_level="warning")
    )
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    bt.logging.info(f"Relay listening on http://{ctx.config.listen_host}:{ctx.config.listen_port}")
    return server, thread


def main() -> int:
    config = radio_config()
    bt.logging.set_config(config=config.logging)

    env_cfg = load_radio_env(panic_if_diverged=config.radio.panic_if_diverged)
    keypair = _make_keypair(config, env_cfg)
    ctx = build_context(env_cfg, keypair)
    hook = _build_check(config, ctx)

    server, thread = _serve_relay(ctx)
    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, lambda *_: ctx.stop_event.set())

    try:
        BlockScheduler(ctx, on_messages=hook).run()
    except PoiDivergedError as exc:
        bt.logging.error(f"Stopping radio: {exc}")
        return 1
    finally:
        server.should_exit = True
        thread.join(timeout=5.0)
        discarded = ctx.buffer.clear()
        if discarded:
            bt.logging.info(f"Discarded {discarded} unconsumed message(s) on shutdown")

    if hook is not None and hook.exit_code is not None:
        return hook.exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
