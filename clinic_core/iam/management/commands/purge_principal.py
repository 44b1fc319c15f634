# clinic_core/iam/management/commands/purge_principal.py

from django.core.management.base import BaseCommand, CommandError

from clinic_core.access.errors import AccessControlError
from clinic_core.iam.services.deletion import permanently_delete_principal


class Command(BaseCommand):
    help = "Permanently delete a deactivated principal, reassigning its records to the acting principal."

    def add_arguments(self, parser):
        parser.add_argument("target", type=int, help="Id of the principal to purge.")
        parser.add_argument("--acting", type=int, required=True, help="Id of the administrator performing the purge.")

    def handle(self, *args, **options):
        try:
            plan = permanently_delete_principal(
                target_id=options["target"],
                acting_principal_id=options["acting"],
            )
        except AccessControlError as exc:
            raise CommandError(f"{exc.default_code}: {exc.detail}") from exc

        for ref in plan.references:
            self.stdout.write(f"  {ref.table}.{ref.column}: {ref.rows} row(s)")

        self.stdout.write(
            self.style.SUCCESS(
                f"Principal {plan.target_id} purged. Reassigned {plan.total_rows} row(s) to {plan.reassigned_to}."
            )
        )
