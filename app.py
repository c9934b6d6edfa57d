import os
import logging

DEFAULT_LOG_LEVEL = 'INFO'

log_level = os.environ.get('LOG_LEVEL', DEFAULT_LOG_LEVEL).upper()

if log_level not in logging._nameToLevel:
    log_level = DEFAULT_LOG_LEVEL

logging.basicConfig(
    format='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
    level=log_level,
    datefmt='%Y-%m-%d %H:%M:%S',
)

import asyncio
import uvicorn
import socketio
from fastapi import FastAPI

from utils.config import CONFIG
from utils.broadcaster import Broadcaster
from utils.dispatcher import EventDispatcher
from utils.pruner import Pruner
from utils.transport import SocketIOTransport
from objects.alarms import Alarms
from objects.connections import Connections

log = logging.getLogger('main')

sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*')

app = FastAPI()
connections = Connections()
alarms = Alarms()
transport = SocketIOTransport(sio)
pruner = Pruner(connections, alarms, CONFIG.client_expiry)
broadcaster = Broadcaster(transport, connections, alarms, CONFIG.max_alarms, CONFIG.send_timeout)
dispatcher = EventDispatcher(connections, alarms, pruner, broadcaster, transport)

asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


@app.get('/api/v1/health')
async def get_health():
    return 'I\'m healthy!'

@app.get('/api/v1/alarms')
async def get_alarms():
    return alarms.get_list(json_friendly=True)

@app.get('/api/v1/clients')
async def get_clients():
    return connections.get_list(json_friendly=True)


@sio.on('connect')
async def handle_connect(sid, environ):
    await dispatcher.on_open(sid)

@sio.on('disconnect')
async def handle_disconnect(sid, reason=None):
    log.debug(f'Client \'{sid}\' disconnect reason: {str(reason)}')
    await dispatcher.on_close(sid)

@sio.on('message')
async def handle_message(sid, data=None):
    log.debug(f'Recieved message from client \'{sid}\': {data!r}')
    await dispatcher.on_message(sid, data)

@sio.on('heartbeat')
async def handle_heartbeat(sid, data=None):
    await dispatcher.on_heartbeat(sid)


async def main():
    log.info(f'Listening at http://{CONFIG.host}:{CONFIG.port}...')
    uvicorn_config = uvicorn.Config(asgi_app,
                                    host=CONFIG.host,
                                    port=CONFIG.port,
                                    log_config=None,
                                    log_level=None,
                                    access_log=False)
    uvicorn_server = uvicorn.Server(uvicorn_config)
    try:
        # uvicorn stops listening and drains connections on SIGINT.
        await uvicorn_server.serve()
    except asyncio.CancelledError:
        pass
    except Exception as e:
        log.error(f'Unexpected error occured: {e}')
    finally:
        log.info('Shutting down...')

if __name__ == '__main__':
    asyncio.run(main())
