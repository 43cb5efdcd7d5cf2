"""Serve command - run the HTTP server in the foreground."""

import cyclopts
import logfire
import uvicorn

app = cyclopts.App(name="serve", help="Run the HTTP server")


@app.default
def serve(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Run the API server with uvicorn.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
    """
    # Logfire must be configured before the app instruments itself
    logfire.configure(send_to_logfire="if-token-present", console=False)
    uvicorn.run(
        "redflag.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )
