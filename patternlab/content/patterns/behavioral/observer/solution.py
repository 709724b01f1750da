class NewsFeed:
    def __init__(self):
        self._observers = []

    def subscribe(self, observer):
        self._observers.append(observer)

    def unsubscribe(self, observer):
        self._observers.remove(observer)

    def publish(self, headline):
        for observer in list(self._observers):
            observer.update(headline)


class Reader:
    def __init__(self, name):
        self.name = name
        self.headlines = []

    def update(self, headline):
        self.headlines.append(headline)


if __name__ == "__main__":
    feed = NewsFeed()
    alice, bob = Reader("alice"), Reader("bob")
    feed.subscribe(alice)
    feed.subscribe(bob)
    feed.publish("Observer pattern explained")
    print(alice.headlines, bob.headlines)
