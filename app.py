"""Web entry point for the node garden."""

from node_garden.visualization.dash_app import app

server = app.server  # expose Flask server for gunicorn

if __name__ == "__main__":
    import os
    port = int(os.environ.get("PORT", 8050))
    app.run(host="0.0.0.0", debug=False, port=port)
