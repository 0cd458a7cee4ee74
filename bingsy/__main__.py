"""
__main__.py

This file adds support for running bingsy as a python module instead of invoking the "bingsy" command line entrypoint.

See the following for a nice high level overview of what __main__ is intended for:

https://stackoverflow.com/questions/4042905/what-is-main-py
https://docs.python.org/3/using/cmdline.html#cmdoption-m

"""


from bingsy.cli import main


if __name__ == "__main__":
    main()
