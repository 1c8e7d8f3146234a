from bingo import socketio


def sweep_once(app, registry, max_idle: int) -> None:
    """Run one eviction pass; errors are logged so the sweeper keeps going."""
    try:
        evicted = registry.evict_idle_rooms(max_idle)
    except Exception:
        app.logger.exception("[sweeper-error] eviction pass failed")
        return
    if evicted:
        app.logger.info(f"[sweeper] evicted={len(evicted)} remaining={len(registry.rooms)}")


def start_room_sweeper(app, registry) -> bool:
    """Start the background task that evicts abandoned rooms.

    - No-ops in TESTING mode (unless ENABLE_SWEEPER_IN_TESTS is set)
    - No-ops when ROOM_IDLE_EXPIRY_SEC is 0
    - Wakes every ROOM_SWEEP_INTERVAL_SEC and drops rooms with no host and no
      online players that have been idle past the expiry
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SWEEPER_IN_TESTS'):
        return False

    max_idle = int(app.config.get('ROOM_IDLE_EXPIRY_SEC', 0))
    if max_idle <= 0:
        app.logger.info("[sweeper-off] room expiry disabled")
        return False
    interval = max(1, int(app.config.get('ROOM_SWEEP_INTERVAL_SEC', 300)))

    def _worker():
        while True:
            socketio.sleep(interval)
            sweep_once(app, registry, max_idle)

    app.logger.info(f"[sweeper-start] interval={interval}s expiry={max_idle}s")
    socketio.start_background_task(_worker)
    return True
