import click

class CLIException(BaseException):
    def __init__(self, *args, description: str = "Something happend..."):
        click.echo(description, err=True)
        self.description = description
        super().__init__(*args)

    def __str__(self) -> str:
        return self.description
