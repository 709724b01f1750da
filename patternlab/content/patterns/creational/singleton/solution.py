class Config:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.values = {}
        return cls._instance


if __name__ == "__main__":
    first = Config()
    second = Config()
    first.values["debug"] = True
    assert first is second
    print(second.values)
