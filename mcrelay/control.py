"""HTTP status and control API served with aiohttp."""
import logging
import os

from aiohttp import web

from .lifecycle import ADMIN_STOP_MESSAGE

logger = logging.getLogger(__name__)

RELAY_KEY = web.AppKey('relay', object)


async def get_status(request):
    relay = request.app[RELAY_KEY]
    status = relay.status()
    return web.json_response({
        'status': status['status'],
        'message': f"Minecraft {relay.settings.supported_version} WebSocket Server",
        'playerCount': status['playerCount'],
        'uptimeSeconds': status['uptimeSeconds'],
    })


async def post_start(request):
    relay = request.app[RELAY_KEY]
    try:
        await relay.start()
    except Exception as e:
        logger.error(f"Error starting relay: {e}")
        return web.json_response({'success': False, 'error': str(e)}, status=500)
    return web.json_response({'success': True, 'message': 'Server started'})


async def post_stop(request):
    relay = request.app[RELAY_KEY]
    try:
        await relay.stop(ADMIN_STOP_MESSAGE)
    except Exception as e:
        logger.error(f"Error stopping relay: {e}")
        return web.json_response({'success': False, 'error': str(e)}, status=500)
    return web.json_response({'success': True, 'message': 'Server stopped'})


def create_app(relay):
    app = web.Application()
    app[RELAY_KEY] = relay
    app.router.add_get('/', get_status)
    app.router.add_post('/api/start', post_start)
    app.router.add_post('/api/stop', post_stop)
    public_dir = relay.settings.public_dir
    if public_dir and os.path.isdir(public_dir):
        app.router.add_static('/static/', public_dir)
        logger.info(f"📁 Serving static files from {public_dir}")
    return app


async def run_http_server(relay):
    """Start the control API and return its runner so the caller can clean it up."""
    runner = web.AppRunner(create_app(relay), access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, relay.settings.host, relay.settings.port)
    await site.start()
    logger.info(f"🌐 Control API running at http://{relay.settings.host}:{relay.settings.port}")
    return runner
