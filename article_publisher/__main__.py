from article_publisher.main import run

run()
