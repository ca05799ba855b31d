from bazapta.main import run

run()
