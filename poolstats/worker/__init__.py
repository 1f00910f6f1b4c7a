from poolstats.worker.cron_handler import handle_cron, run_collection
