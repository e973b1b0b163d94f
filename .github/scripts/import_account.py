#!/usr/bin/env python3

from token_deployment.accounts import import_account_from_env


def main():
    account = import_account_from_env()
    print(f"Account imported: {account.alias} {account.address}")


if __name__ == '__main__':
    main()
