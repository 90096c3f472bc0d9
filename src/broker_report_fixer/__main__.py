from broker_report_fixer import cli

if __name__ == "__main__":
    cli.app()
