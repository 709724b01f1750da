class CelsiusSensor:
    def read_celsius(self):
        return 21.5


class FahrenheitAdapter:
    def __init__(self, sensor):
        self._sensor = sensor

    def read_fahrenheit(self):
        return self._sensor.read_celsius() * 9 / 5 + 32


if __name__ == "__main__":
    print(FahrenheitAdapter(CelsiusSensor()).read_fahrenheit())
