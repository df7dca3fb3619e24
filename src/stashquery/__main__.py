from stashquery.main import run

run()
