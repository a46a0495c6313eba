import enum

from helmsman import *


class Mood(enum.Enum):
    Calm = "calm"
    Rough = "rough"


def greet(name, times, flags):
    for _ in range(times):
        print(("HELLO %s!" if "--loud" in flags else "hello %s") % name)


def weather(mood):
    return "the sea is %s" % mood.value


def quit(caller):
    caller.stop()


if __name__ == '__main__':
    Shell(
        command(greet, descr="greets someone").positional("name").named("times", uint8, default=1).with_flags(),
        command(weather, descr="reports the sea").positional("mood", Mood),
        command(quit, descr="leaves the shell").with_caller(),
        interface_name="helm",
        ignore_case=True,
    ).run()
