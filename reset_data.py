"""
reset_data.py
-------------
Utility script to clear all stored data (accounts, vehicles, bookings) from the local data.pkl file.

Usage:
    $ python reset_data.py

After running this script, you can repopulate sample data by executing:
    $ python seeds.py
"""

from rentmarket.config import Config
from rentmarket.models.store import Store


def main():
    store = Store.instance(Config.DATA_PATH or None)
    store.clear()
    store.save()

    print("Store has been cleared.")
    print("Tip: Run `python seeds.py` to regenerate demo data.")


if __name__ == "__main__":
    main()
