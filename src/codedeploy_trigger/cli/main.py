"""Entry point for the codedeploy-trigger command."""

import click

from codedeploy_trigger import __version__
from codedeploy_trigger.cli.commands.deploy import run, status


@click.group(name="codedeploy-trigger")
@click.version_option(__version__, prog_name="codedeploy-trigger")
def main() -> None:
    """Create AWS CodeDeploy deployments and wait for them to finish.

    Example:

        codedeploy-trigger run --application-name app \\
            --deployment-group-name group --target ECS \\
            --task-definition-arn arn:aws:ecs:... --container-name web \\
            --container-port 8080
    """


main.add_command(run)
main.add_command(status)


if __name__ == "__main__":
    main()
