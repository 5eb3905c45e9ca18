from prediction_tracker.cli.main import entrypoint

entrypoint()
