from core.readers import OtpThrottle, dedupe, invalid_interests, next_onboarding_step


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_next_onboarding_step():
    assert next_onboarding_step({"name": "", "interests": []}) == "name"
    assert next_onboarding_step({"name": "Ann", "interests": []}) == "interests"
    assert next_onboarding_step({"name": "Ann", "interests": ["Sports"]}) == "welcome"


def test_invalid_interests_and_dedupe():
    assert invalid_interests(["Sports", "Knitting"]) == ["Knitting"]
    assert dedupe(["a", "b", "a"]) == ["a", "b"]


def test_throttle_blocks_within_cooldown():
    clock = Clock()
    throttle = OtpThrottle(60, clock=clock)
    assert throttle.hit("a@example.com")
    clock.now += 10.5
    assert not throttle.hit("a@example.com")
    assert throttle.retry_after("a@example.com") == 50
    assert throttle.hit("b@example.com")

    clock.now += 50
    assert throttle.retry_after("a@example.com") == 0
    assert throttle.hit("a@example.com")


def test_throttle_reset():
    throttle = OtpThrottle(60, clock=Clock())
    throttle.hit("a@example.com")
    throttle.reset("a@example.com")
    assert throttle.hit("a@example.com")
