from watchparty import create_app, run_options, socketio

app = create_app()

if __name__ == '__main__':
    try:
        # Use SocketIO server to enable websockets in dev
        socketio.run(app, **run_options(app))
    finally:
        app.extensions['room_registry'].clear()
        app.logger.info("Room registry cleared on shutdown")
