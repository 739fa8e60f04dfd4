from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='LedgerEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('event_type', models.CharField(db_index=True, help_text='Name of the ledger event, e.g. VoteCast.', max_length=64)),
                ('payload', models.JSONField()),
                ('timestamp', models.DateTimeField(db_index=True, editable=False)),
                ('previous_hash', models.CharField(blank=True, help_text='Hash of the previous entry in the journal.', max_length=64)),
                ('current_hash', models.CharField(db_index=True, help_text="Hash of this entry's data.", max_length=64, unique=True)),
            ],
            options={
                'verbose_name_plural': 'ledger entries',
                'ordering': ['id'],
            },
        ),
    ]
