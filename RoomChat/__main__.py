"""
Entry point for RoomChat application.
This module provides a command-line interface to start the chat server and the web client.
"""

import argparse

from RoomChat.config import config
from RoomChat.start import server


def parse(argv=None):
    parser = argparse.ArgumentParser(prog='RoomChat', description='RoomChat starter')
    subparsers = parser.add_subparsers(dest='command', required=True, help='Available commands')

    server_parser = subparsers.add_parser('server', help='Startup websocket SERVER and web client')
    server_parser.add_argument('--host', default=config.DEFAULT_HOST,
                               help=f'Listening address (default: {config.DEFAULT_HOST})')
    server_parser.add_argument('--port', type=int, default=config.DEFAULT_PORT,
                               help=f'WebSocket port (default: {config.DEFAULT_PORT})')
    server_parser.add_argument('--http-port', type=int, default=None,
                               help='Web client port (default: websocket port + 1)')
    server_parser.add_argument('--heartbeat-interval', type=float, default=config.HEARTBEAT_INTERVAL,
                               help=f'Seconds between liveness probes (default: {config.HEARTBEAT_INTERVAL:g})')

    srv_parser = subparsers.add_parser('srv-only', help='Startup websocket server only')
    srv_parser.add_argument('--host', default=config.DEFAULT_HOST, help='Listening address')
    srv_parser.add_argument('--port', type=int, default=config.DEFAULT_PORT, help='WebSocket port')
    srv_parser.add_argument('--heartbeat-interval', type=float, default=config.HEARTBEAT_INTERVAL,
                            help='Seconds between liveness probes')

    web_parser = subparsers.add_parser('web', help='Startup web client only')
    web_parser.add_argument('--host', default=config.DEFAULT_HOST, help='Listening address')
    web_parser.add_argument('--port', type=int, default=config.DEFAULT_HTTP_PORT,
                            help=f'Web client port (default: {config.DEFAULT_HTTP_PORT})')

    return parser.parse_args(argv)


def main(argv=None):
    args = parse(argv)

    if args.command == 'server':
        server.server(host=args.host, port=args.port, http_port=args.http_port,
                      heartbeat_interval=args.heartbeat_interval)
    elif args.command == 'srv-only':
        server.server(host=args.host, port=args.port,
                      heartbeat_interval=args.heartbeat_interval, srv_only=True)
    elif args.command == 'web':
        server.web(host=args.host, port=args.port)
    else:
        raise Exception('Unknown command')


if __name__ == '__main__':
    main()
