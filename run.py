from hijack import create_app, socketio

app = create_app()


def main():
    # SocketIO server so websockets work in dev
    socketio.run(
        app,
        host=app.config['HOST'],
        port=app.config['PORT'],
        debug=app.config['RUN_DEBUG'],
        allow_unsafe_werkzeug=True,
    )


if __name__ == '__main__':
    main()
