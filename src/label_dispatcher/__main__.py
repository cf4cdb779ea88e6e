from label_dispatcher.cli import run

run()
