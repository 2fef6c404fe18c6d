from rich.pretty import pprint

from argmatch import *

parser = Parser("demo", "Show how a token stream binds to a small grammar.", shell=True, colorful=True)
parser.add_positional("source", help="file to read")
parser.add_positional("targets", nargs="+", help="files to write")
parser.add_optional("-j", "--jobs", nargs=1, help="parallel workers")
parser.add_optional("-t", "--tags", nargs="*", help="labels attached to every target")
parser.add_optional("-v", "--verbose", nargs=0)


if __name__ == '__main__':
    pprint(parser.parse())
